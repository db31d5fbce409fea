from typing import Dict, List, Optional, Tuple


def parse_command(input_string: str, **kwargs) -> Tuple[Optional[str], List[str], Dict[str, object]]:
    """
    Split `cmd a b -flag value -switch` into ('cmd', ['a', 'b'], {'flag': 'value', 'switch': True}).
    Unknown commands come back as None when `accepted_commands` is given.
    """
    accepted_commands = kwargs.get('accepted_commands', [])
    if not input_string or not input_string.strip():
        return None, [], {}
    parts = [x.strip() for x in input_string.strip().strip('/').split(' ') if x.strip()]
    if not parts:
        return None, [], {}

    _command = parts[0]
    if accepted_commands and _command not in accepted_commands:
        return None, [], {}
    seq_params = []
    named_params = {}
    i = 1
    while i < len(parts):
        part = parts[i]
        if not part.startswith('-'):
            seq_params.append(part)
        else:
            command = part.strip('-')
            if i + 1 < len(parts) and not parts[i + 1].startswith('-'):
                named_params[command] = parts[i + 1]
                i += 1  # skip the value
            else:
                named_params[command] = True
        i += 1
    return _command, seq_params, named_params
