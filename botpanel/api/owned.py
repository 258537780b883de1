"""
Owner-scoped CRUD router factory.

Every tenant table exposes the same endpoints: list with equality filters,
substring search over the serialized row, get, create, partial update,
activity toggle and delete. Rows of other tenants behave exactly like missing
rows (404).
"""
import uuid
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from botpanel.api.deps import get_current_user_id
from botpanel.db.database import get_db
from botpanel.db.repositories import owned
from botpanel.utils.feature_flags import FeatureFlagKey, is_feature_enabled

# (payload field, referenced model, label used in the 404 detail)
Reference = Tuple[str, Any, str]

CONSTRAINT_VIOLATION = "Constraint violation"


def require_feature(flag: FeatureFlagKey) -> Callable[[], None]:
    def _check_feature():
        if not is_feature_enabled(flag):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feature disabled")
    return _check_feature


def ensure_references_owned(db: Session, user_id: uuid.UUID, values: Dict[str, Any], references: Sequence[Reference]):
    """Reject payloads pointing at rows the caller does not own."""
    for field, ref_model, label in references:
        ref_id = values.get(field)
        if ref_id is None:
            continue
        if owned.get_owned(db, ref_model, ref_id, user_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")


def serializer_for(read_schema: Type[BaseModel]) -> Callable[[Any], Dict[str, Any]]:
    def _serialize(row) -> Dict[str, Any]:
        return read_schema.model_validate(row).model_dump(mode="json", by_alias=True)
    return _serialize


def _filter_values(filters) -> Dict[str, Any]:
    return {k: v for k, v in asdict(filters).items() if v is not None}


def build_owned_router(
    *,
    prefix: str,
    tags: List[str],
    model,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    read_schema: Type[BaseModel],
    filters_cls: type,
    label: str,
    references: Sequence[Reference] = (),
    order_by: Optional[Callable[[], list]] = None,
    conflict_detail: str = CONSTRAINT_VIOLATION,
    prepare_create: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None,
    prepare_update: Optional[Callable[[Any, Dict[str, Any]], Dict[str, Any]]] = None,
    feature_flag: Optional[FeatureFlagKey] = None,
    custom_writes: bool = False,
) -> APIRouter:
    """Build the standard endpoint set for one owner-scoped table.

    With ``custom_writes`` the create and update endpoints are left to the
    caller, which registers its own on the returned router.
    """
    dependencies = [Depends(require_feature(feature_flag))] if feature_flag else []
    router = APIRouter(prefix=prefix, tags=tags, dependencies=dependencies)
    slug = model.__tablename__
    not_found = f"{label} not found"
    serialize = serializer_for(read_schema)

    def _ordering():
        return order_by() if order_by else None

    def create_endpoint(
        payload: create_schema,
        db: Session = Depends(get_db),
        user_id: uuid.UUID = Depends(get_current_user_id),
    ):
        values = payload.model_dump()
        ensure_references_owned(db, user_id, values, references)
        if prepare_create:
            values = prepare_create(values)
        try:
            return owned.create_owned(db, model, user_id, values)
        except IntegrityError:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail)

    @router.get("/", response_model=List[read_schema], name=f"list_{slug}")
    def list_endpoint(
        filters: filters_cls = Depends(filters_cls),
        db: Session = Depends(get_db),
        user_id: uuid.UUID = Depends(get_current_user_id),
    ):
        return owned.list_owned(db, model, user_id, filters=_filter_values(filters), order_by=_ordering())

    @router.get("/search/", response_model=List[read_schema], name=f"search_{slug}")
    def search_endpoint(
        query: str = "",
        filters: filters_cls = Depends(filters_cls),
        db: Session = Depends(get_db),
        user_id: uuid.UUID = Depends(get_current_user_id),
    ):
        return owned.search_owned(
            db,
            model,
            user_id,
            query,
            serialize=serialize,
            filters=_filter_values(filters),
            order_by=_ordering(),
        )

    @router.get("/{row_id}", response_model=read_schema, name=f"get_{slug}")
    def get_endpoint(
        row_id: uuid.UUID,
        db: Session = Depends(get_db),
        user_id: uuid.UUID = Depends(get_current_user_id),
    ):
        row = owned.get_owned(db, model, row_id, user_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return row

    def update_endpoint(
        row_id: uuid.UUID,
        payload: update_schema,
        db: Session = Depends(get_db),
        user_id: uuid.UUID = Depends(get_current_user_id),
    ):
        row = owned.get_owned(db, model, row_id, user_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        changes = payload.model_dump(exclude_unset=True)
        ensure_references_owned(db, user_id, changes, references)
        if prepare_update:
            changes = prepare_update(row, changes)
        try:
            return owned.update_owned(db, model, row_id, user_id, changes)
        except IntegrityError:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail)

    if not custom_writes:
        router.add_api_route(
            "/", create_endpoint, methods=["POST"], response_model=read_schema,
            status_code=status.HTTP_201_CREATED, name=f"create_{slug}",
        )
        router.add_api_route(
            "/{row_id}", update_endpoint, methods=["PATCH"], response_model=read_schema, name=f"update_{slug}"
        )
        router.add_api_route(
            "/{row_id}", update_endpoint, methods=["PUT"], response_model=read_schema, name=f"replace_{slug}"
        )

    if owned.activity_flag_name(model):
        @router.post("/{row_id}/toggle", response_model=read_schema, name=f"toggle_{slug}")
        def toggle_endpoint(
            row_id: uuid.UUID,
            db: Session = Depends(get_db),
            user_id: uuid.UUID = Depends(get_current_user_id),
        ):
            row = owned.toggle_owned(db, model, row_id, user_id)
            if row is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
            return row

    @router.delete("/{row_id}", status_code=status.HTTP_204_NO_CONTENT, name=f"delete_{slug}")
    def delete_endpoint(
        row_id: uuid.UUID,
        db: Session = Depends(get_db),
        user_id: uuid.UUID = Depends(get_current_user_id),
    ):
        if not owned.delete_owned(db, model, row_id, user_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return None

    return router
