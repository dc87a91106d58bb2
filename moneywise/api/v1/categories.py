"""Category registry endpoints"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from moneywise.api.dependencies import get_current_user_id, get_request_id
from moneywise.api.errors import operation, parse_id
from moneywise.api.v1.schemas import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    Envelope,
    MessageResponse,
)
from moneywise.domain.exceptions import ConflictError, NotFoundError
from moneywise.infrastructure.database.repositories import CategoryRepository
from moneywise.infrastructure.database.session import get_db

# The registry is shared by all users; the caller only has to be authenticated
router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.post("/categories", status_code=201, response_model=Envelope[CategoryOut])
def create_category(
    body: CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    with operation(db, "Error creating category", get_request_id(request)):
        category_repo = CategoryRepository(db)
        if category_repo.get_by_name(body.name):
            raise ConflictError("Category already exists")

        category = category_repo.create_category(name=body.name, type=body.type, active=body.active)
        db.commit()

        return Envelope(msg="Category created successfully", data=CategoryOut.model_validate(category))


@router.get("/categories", response_model=Envelope[list[CategoryOut]])
def list_categories(request: Request, db: Session = Depends(get_db)):
    with operation(db, "Error retrieving categories", get_request_id(request)):
        categories = CategoryRepository(db).list_categories()
        if not categories:
            raise NotFoundError("No categories found")

        return Envelope(
            msg="Categories retrieved successfully",
            data=[CategoryOut.model_validate(c) for c in categories],
        )


@router.patch("/categories/{category_id}", response_model=Envelope[CategoryOut])
def update_category(
    category_id: str,
    body: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    with operation(db, "Error updating category", get_request_id(request)):
        category_repo = CategoryRepository(db)
        category = category_repo.get_category(parse_id(category_id, "category"))
        if not category:
            raise NotFoundError("Category not found")

        if body.name is not None and body.name != category.name:
            if category_repo.get_by_name(body.name):
                raise ConflictError("Category already exists")
            category.name = body.name
        if body.type is not None:
            category.type = body.type
        if body.active is not None:
            category.active = body.active

        db.commit()

        return Envelope(msg="Category updated successfully", data=CategoryOut.model_validate(category))


@router.delete("/categories/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: str,
    request: Request,
    db: Session = Depends(get_db),
):
    with operation(db, "Error deleting category", get_request_id(request)):
        category_repo = CategoryRepository(db)
        category = category_repo.get_category(parse_id(category_id, "category"))
        if not category:
            raise NotFoundError("Category not found")

        category_repo.delete_category(category)
        db.commit()

        return MessageResponse(msg="Category deleted successfully")
