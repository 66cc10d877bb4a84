# utils/auth.py
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, NamedTuple, Optional, Tuple

from flask_login import current_user

from errors import ForbiddenError

MANAGE_CATEGORY = "manage_category"
MANAGE_SALES = "manage_sales"
EDIT_REQUISITIONS = "edit_requisitions"
CATEGORY_RESOURCE = "category"


class Grant(NamedTuple):
    template_code: str
    resource_type: Optional[str] = None
    resource_id: Optional[int] = None


@dataclass(frozen=True)
class Actor:
    """The authenticated caller: user id plus the grants presented at call time."""

    id: int
    grants: Tuple[Grant, ...] = field(default_factory=tuple)

    @property
    def scope(self) -> "AuthorizationContext":
        return resolve_scope(self.grants)


@dataclass(frozen=True)
class AuthorizationContext:
    has_global: bool = False
    allowed_category_ids: FrozenSet[int] = frozenset()
    has_sales_capability: bool = False
    is_editor: bool = False

    def can_manage(self, category_id: int | None) -> bool:
        if self.has_global:
            return True
        return category_id is not None and category_id in self.allowed_category_ids

    @property
    def sees_everything(self) -> bool:
        return self.has_global or self.is_editor


def resolve_scope(grants: Iterable[Grant]) -> AuthorizationContext:
    has_global = False
    allowed = set()
    has_sales = False
    is_editor = False
    for g in grants or ():
        code = g.template_code
        if code == MANAGE_CATEGORY:
            if g.resource_id is None:
                has_global = True
            elif (g.resource_type or CATEGORY_RESOURCE) == CATEGORY_RESOURCE:
                allowed.add(int(g.resource_id))
        elif code == MANAGE_SALES:
            has_sales = True
        elif code == EDIT_REQUISITIONS:
            is_editor = True
    return AuthorizationContext(
        has_global=has_global,
        allowed_category_ids=frozenset(allowed),
        has_sales_capability=has_sales,
        is_editor=is_editor,
    )


def authorize_sellable(ctx: AuthorizationContext, item_id: int, material_name: str):
    if not ctx.has_sales_capability:
        raise ForbiddenError(
            f"Only users with '{MANAGE_SALES}' may handle sellable material "
            f"{material_name} (item {item_id}).",
            item_id=item_id,
        )


def authorize_category(
    ctx: AuthorizationContext,
    category_id: int | None,
    item_id: int | None = None,
    allow_editor: bool = False,
):
    if ctx.can_manage(category_id) or (allow_editor and ctx.is_editor):
        return
    raise ForbiddenError(
        f"No permission for materials of category {category_id if category_id is not None else '?'}.",
        item_id=item_id,
        category_id=category_id,
    )


def current_actor() -> Actor:
    """Actor for the Flask-Login user of the current request."""
    from dao import user as user_dao

    if not current_user.is_authenticated:
        raise ForbiddenError("Authentication required.", http_status=401)
    return Actor(
        id=int(current_user.id), grants=tuple(user_dao.grants_of(current_user))
    )
