from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from blockwatch.container import Container
from blockwatch.parser import Parser


@inject
def get_parser(parser: Parser = Depends(Provide[Container.parser])) -> Parser:
    return parser
