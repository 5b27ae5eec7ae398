from typing import Annotated

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import mapped_column

PrimaryKeyStr = Annotated[
    str,
    mapped_column(String(200), primary_key=True),
]
ForeignKeyProtocolId = Annotated[
    str,
    mapped_column(ForeignKey("protocols.id"), index=True),
]
ForeignKeyMarketId = Annotated[
    str,
    mapped_column(ForeignKey("markets.id"), index=True),
]
ForeignKeyAccountId = Annotated[
    str,
    mapped_column(ForeignKey("accounts.id"), index=True),
]
TransactionHash = Annotated[
    str,
    mapped_column(String(66)),
]
