from pydantic import BaseModel

from backoffice.schemas.ledger_entry import LedgerEntryOut

class ProspectMaterializeOut(BaseModel):
    prospect_id: int
    created: bool
    entry: LedgerEntryOut
