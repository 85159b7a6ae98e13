from fastapi import APIRouter

from subguard.dependencies import StoreDep
from subguard.transactions.schemas import Transaction

router = APIRouter()


@router.get("/", response_model=list[Transaction])
async def list_transactions(store: StoreDep) -> list[Transaction]:
    return await store.get_transactions()
