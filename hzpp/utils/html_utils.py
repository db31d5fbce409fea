from typing import List, Optional

from lxml import etree

from hzpp.utils.exceptions import ParseException


def has_class_xpath(class_name: str) -> str:
    """XPath predicate body matching one token of the class attribute"""
    return f"contains(concat(' ', normalize-space(@class), ' '), ' {class_name} ')"


def parse_html(html: str):
    tree = etree.HTML(html)
    if tree is None:
        raise ParseException('Empty html document')
    return tree


def text_of(element) -> str:
    if element is None:
        return ''
    return ''.join(element.itertext()).strip()


def first_text(tree, xpath: str) -> Optional[str]:
    nodes = tree.xpath(xpath)
    if not nodes:
        return None
    node = nodes[0]
    return node.strip() if isinstance(node, str) else text_of(node)


def has_class(element, class_name: str) -> bool:
    return class_name in (element.get('class') or '').split()


def input_value(tree, name: str) -> Optional[str]:
    values = tree.xpath(f'//input[@name="{name}"]/@value')
    return values[0] if values else None


def image_titles(cell) -> List[str]:
    """Title (or alt) of every image in a cell, cut at the first " - " """
    titles = []
    for img in cell.xpath('.//img'):
        title = img.get('title') or img.get('alt')
        if title:
            titles.append(title.split(' - ')[0].strip())
    return titles
