"""Transaction endpoints for the API."""

import io
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import Message
from components.transaction import schemas
from components.transaction.repository import TransactionRepository
from restapi.endpoints.auth import get_current_user
from components.user.models import User

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=schemas.Transaction)
async def create_transaction(
    transaction: schemas.TransactionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Record a transaction."""
    return await TransactionRepository(db).create(current_user.id, transaction)


@router.get("/", response_model=List[schemas.Transaction])
async def read_transactions(
    type: Optional[schemas.TransactionType] = Query(None, description="Filter by transaction type"),
    category: Optional[str] = Query(None, description="Filter by category name"),
    date_from: Optional[date] = Query(None, description="Transactions on or after this date"),
    date_to: Optional[date] = Query(None, description="Transactions on or before this date"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=500, description="Number of records to return"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the user's transactions with optional filtering, newest first."""
    return await TransactionRepository(db).get_all(
        current_user.id,
        type_=type,
        category=category,
        date_from=date_from,
        date_to=date_to,
        skip=skip,
        limit=limit,
    )


@router.post("/import", response_model=schemas.TransactionImportResponse)
async def import_transactions(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Import transactions from a CSV file.

    The CSV file must have the following columns:
    - date: YYYY-MM-DD or DD.MM.YYYY
    - amount: Non-zero number
    - type: income, expense or transfer
    - category: Category name
    - description: Free text

    Optional columns are subcategory, payment_method and notes. Nothing is
    imported when any row is invalid.
    """
    # Check if file is CSV
    if not file.filename or not file.filename.endswith(".csv"):
        return schemas.TransactionImportResponse(
            success=False,
            message="Invalid file format. Only CSV files (.csv) are supported."
        )

    file_content = await file.read()
    success, message, imported, errors = await TransactionRepository(db).import_from_csv(
        current_user.id, io.BytesIO(file_content)
    )

    if not success:
        return schemas.TransactionImportResponse(
            success=False,
            message=message,
            errors=[schemas.TransactionImportError(**error) for error in errors],
        )

    return schemas.TransactionImportResponse(success=True, message=message, imported=imported)


@router.get("/{transaction_id}", response_model=schemas.Transaction)
async def read_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a transaction by ID."""
    transaction = await TransactionRepository(db).get(current_user.id, transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@router.put("/{transaction_id}", response_model=schemas.Transaction)
async def update_transaction(
    transaction_id: int,
    transaction: schemas.TransactionUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the given fields of a transaction."""
    updated = await TransactionRepository(db).update(current_user.id, transaction_id, transaction)
    if updated is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return updated


@router.delete("/{transaction_id}", response_model=Message)
async def delete_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a transaction."""
    if not await TransactionRepository(db).delete(current_user.id, transaction_id):
        raise HTTPException(status_code=404, detail="Transaction not found")
    return Message(message="Transaction deleted successfully")
