from coagula.strategies.base import Strategy
from coagula.strategies.orm import OrmJoinedStrategy, OrmSelectinStrategy
from coagula.strategies.raw import RawSqlStrategy
from coagula.strategies.single import SingleJoinStrategy
from coagula.strategies.split import SplitStrategy

__all__ = [
    "Strategy",
    "SingleJoinStrategy",
    "SplitStrategy",
    "RawSqlStrategy",
    "OrmJoinedStrategy",
    "OrmSelectinStrategy",
]
