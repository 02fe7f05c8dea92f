from fastapi import APIRouter, Depends, HTTPException

from backoffice.api.deps import owner_id, store
from backoffice.schemas.ledger_entry import ClientCustodyOut
from backoffice.services.money import money_out

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("/{client_id}/custody", response_model=ClientCustodyOut)
def client_custody(client_id: int, st=Depends(store), owner: str = Depends(owner_id)):
    c = st.get("client", client_id)
    if c is None or c.owner_id != owner:
        raise HTTPException(status_code=404, detail="client_not_found")
    return ClientCustodyOut(
        id=c.id,
        name=c.name,
        custody_onshore=money_out(c.custody_onshore),
        custody_offshore=money_out(c.custody_offshore),
        custody_total=money_out(c.custody_total),
    )
