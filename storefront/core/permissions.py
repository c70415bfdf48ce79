"""
Storefront — Role permissions

Flat allow-lists, no role hierarchy: super_admin only has a permission
because it is listed for it. A (from, to) pair missing from
TRANSITION_ROLES is denied for everybody, even if it moves forward.
"""
from dataclasses import dataclass
from enum import Enum as PyEnum

from storefront.models.order import STATUS_SEQUENCE, TERMINAL_STATUSES, OrderStatus
from storefront.models.user import UserRole

_SA = UserRole.SUPER_ADMIN
_A = UserRole.ADMIN
_CASHIER = UserRole.CASHIER
_CHEF = UserRole.CHEF

_P = OrderStatus.PENDING
_AP = OrderStatus.APPROVED
_PG = OrderStatus.PREPARING
_PD = OrderStatus.PREPARED
_C = OrderStatus.COMPLETED
_X = OrderStatus.CANCELLED


# ── Status transitions ──────────────────────────────────────
TRANSITION_ROLES: dict[tuple[OrderStatus, OrderStatus], frozenset[UserRole]] = {
    # single steps
    (_P, _AP): frozenset({_SA, _A, _CASHIER}),
    (_AP, _PG): frozenset({_SA, _A, _CHEF}),
    (_PG, _PD): frozenset({_SA, _A, _CHEF}),
    (_PD, _C): frozenset({_SA, _A, _CASHIER}),
    (_P, _X): frozenset({_SA, _A, _CASHIER}),
    # skip steps
    (_P, _PG): frozenset({_SA, _A}),
    (_P, _PD): frozenset({_SA, _A}),
    (_P, _C): frozenset({_SA, _A}),
    (_AP, _PD): frozenset({_SA, _A}),
    (_AP, _C): frozenset({_SA, _A}),
    (_PG, _C): frozenset({_SA, _A}),
}

# Cancelling anything past pending is an emergency action.
EMERGENCY_CANCEL_ROLES = frozenset({_SA, _A})


def can_transition_status(role: UserRole, from_status: OrderStatus, to_status: OrderStatus) -> bool:
    return role in TRANSITION_ROLES.get((from_status, to_status), frozenset())


def can_cancel_order(role: UserRole, current_status: OrderStatus) -> bool:
    if current_status in TERMINAL_STATUSES:
        return False
    if current_status == OrderStatus.PENDING:
        return can_transition_status(role, OrderStatus.PENDING, OrderStatus.CANCELLED)
    return role in EMERGENCY_CANCEL_ROLES


# ── Features ────────────────────────────────────────────────
class Feature(str, PyEnum):
    VIEW_DASHBOARD_STATS = "view_dashboard_stats"
    VIEW_LIVE_ORDERS = "view_live_orders"
    VIEW_ORDER_HISTORY = "view_order_history"
    MANAGE_INVENTORY = "manage_inventory"
    MANAGE_MENU = "manage_menu"
    MANAGE_USERS = "manage_users"


FEATURE_ROLES: dict[Feature, frozenset[UserRole]] = {
    Feature.VIEW_DASHBOARD_STATS: frozenset({_SA, _A}),
    Feature.VIEW_LIVE_ORDERS: frozenset({_SA, _A, _CASHIER, _CHEF}),
    Feature.VIEW_ORDER_HISTORY: frozenset({_SA, _A, _CASHIER}),
    Feature.MANAGE_INVENTORY: frozenset({_SA, _A}),
    Feature.MANAGE_MENU: frozenset({_SA, _A}),
    Feature.MANAGE_USERS: frozenset({_SA}),
}


def has_permission(role: UserRole, feature: Feature) -> bool:
    return role in FEATURE_ROLES.get(feature, frozenset())


def granted_features(role: UserRole) -> list[Feature]:
    return [feature for feature in Feature if has_permission(role, feature)]


# ── Dashboard tabs ──────────────────────────────────────────
_TAB_FEATURES: tuple[tuple[str, Feature], ...] = (
    ("orders", Feature.VIEW_LIVE_ORDERS),
    ("inventory", Feature.MANAGE_INVENTORY),
    ("menu", Feature.MANAGE_MENU),
    ("history", Feature.VIEW_ORDER_HISTORY),
    ("analytics", Feature.VIEW_DASHBOARD_STATS),
    ("users", Feature.MANAGE_USERS),
)


def visible_tabs(role: UserRole) -> list[str]:
    return [tab for tab, feature in _TAB_FEATURES if has_permission(role, feature)]


# ── Order card actions ──────────────────────────────────────
@dataclass(frozen=True)
class StatusAction:
    status: OrderStatus
    label: str
    confirm_message: str


_ACTION_LABELS: dict[OrderStatus, tuple[str, str]] = {
    _AP: ("Approve", "Approve this order? Stock will be checked and deducted."),
    _PG: ("Start Preparing", "Start preparing this order?"),
    _PD: ("Mark Prepared", "Mark this order as ready for pickup?"),
    _C: ("Complete", "Complete this order? It will be moved to history."),
    _X: ("Cancel", "Cancel this order? Deducted stock is not restored."),
}


def next_status_actions(current_status: OrderStatus, role: UserRole) -> list[StatusAction]:
    """The next single step the role may take, plus cancellation if allowed."""
    actions = []
    if current_status in STATUS_SEQUENCE:
        idx = STATUS_SEQUENCE.index(current_status)
        if idx < len(STATUS_SEQUENCE) - 1:
            nxt = STATUS_SEQUENCE[idx + 1]
            if can_transition_status(role, current_status, nxt):
                actions.append(StatusAction(nxt, *_ACTION_LABELS[nxt]))
    if can_cancel_order(role, current_status):
        actions.append(StatusAction(_X, *_ACTION_LABELS[_X]))
    return actions
