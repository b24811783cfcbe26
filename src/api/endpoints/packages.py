from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from src.api.dependencies import get_db, require_admin
from src.api.serializers import package_to_dict, public_package_to_dict
from src.database.storage import StorefrontDB
from src.integrations.contracts.packages import validate_data_amount

router = APIRouter()


class PackageCreateRequest(BaseModel):
    data_amount: str = Field(..., description="Bundle size, e.g. '5GB'")
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Customer price (GHS)")
    supplier_cost: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Wholesale cost (GHS)")
    is_active: bool = True

    @field_validator("data_amount")
    @classmethod
    def _check_data_amount(cls, value: str) -> str:
        return validate_data_amount(value.strip())


class PackageUpdateRequest(BaseModel):
    data_amount: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    supplier_cost: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    is_active: Optional[bool] = None

    @field_validator("data_amount")
    @classmethod
    def _check_data_amount(cls, value: Optional[str]) -> Optional[str]:
        return validate_data_amount(value.strip()) if value is not None else None


@router.get("/packages", tags=["Packages"])
async def list_packages(db: StorefrontDB = Depends(get_db)):
    """Customer catalogue: active packages only."""
    return [public_package_to_dict(p) for p in db.list_packages(active_only=True)]


@router.get("/packages/{package_id}", tags=["Packages"])
async def get_package(package_id: str, db: StorefrontDB = Depends(get_db)):
    pkg = db.get_package(package_id)
    if not pkg:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return public_package_to_dict(pkg)


@router.post("/packages", tags=["Packages"], dependencies=[Depends(require_admin)])
async def create_package(body: PackageCreateRequest, db: StorefrontDB = Depends(get_db)):
    pkg = db.create_package(
        data_amount=body.data_amount,
        price=body.price,
        supplier_cost=body.supplier_cost,
        is_active=body.is_active,
    )
    return package_to_dict(pkg)


@router.patch("/packages/{package_id}", tags=["Packages"], dependencies=[Depends(require_admin)])
async def update_package(package_id: str, body: PackageUpdateRequest, db: StorefrontDB = Depends(get_db)):
    updates = body.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")
    pkg = db.update_package(package_id, updates)
    if not pkg:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return package_to_dict(pkg)


@router.delete("/packages/{package_id}", tags=["Packages"], dependencies=[Depends(require_admin)])
async def delete_package(package_id: str, db: StorefrontDB = Depends(get_db)):
    if not db.delete_package(package_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    return {"message": "Package deleted successfully"}


@router.get("/admin/packages", tags=["Packages"], dependencies=[Depends(require_admin)])
async def list_packages_admin(db: StorefrontDB = Depends(get_db)):
    return [package_to_dict(p) for p in db.list_packages()]
