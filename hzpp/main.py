import asyncio
import logging
import sys

from hzpp.events.journey_events import handle_list_stations, handle_search, handle_schedule, handle_train_info, \
    handle_progress
from hzpp.service.hzpp_client import HzppClient
from hzpp.utils.command_utils import parse_command
from hzpp.utils.exceptions import exception_handler
from hzpp.utils.log_utils import setup_logging

logger = logging.getLogger(__name__)


class ConsoleMessage:
    def __init__(self, content: str):
        self.content = content

    async def reply(self, content: str, **kwargs):
        print(content)


class HzppConsole:
    command_dict = {
        'stations': handle_list_stations,
        'search': handle_search,
        'schedule': handle_schedule,
        'train': handle_train_info,
        'progress': handle_progress,
    }

    def __init__(self, client: HzppClient = None):
        self.client = client or HzppClient()

    async def on_message(self, message: ConsoleMessage) -> int:
        try:
            command, params, argv = parse_command(message.content, accepted_commands=self.command_dict.keys())
            if not command:
                await message.reply(content=f'Commands: {", ".join(self.command_dict.keys())}')
                return 2
            await self.command_dict[command](message, *params, **argv, _client=self.client)
            return 0
        except Exception as e:
            await exception_handler(message, e)
            return 1


async def main(argv) -> int:
    console = HzppConsole()
    try:
        return await console.on_message(ConsoleMessage(' '.join(argv)))
    finally:
        console.client.close()


def run():
    setup_logging()
    sys.exit(asyncio.run(main(sys.argv[1:])))


if __name__ == "__main__":
    run()
