"""Order status state machine.

Pure rules, no database access: which edges exist, who may take them, and
what a set of order statuses means for the table they sit on.

    aguardando -> em_preparo   admin
    aguardando -> cancelado    admin or the client who placed the order
    em_preparo -> entregue     admin
    entregue   -> arquivado    admin

``cancelado`` and ``arquivado`` are terminal.
"""
import enum
from typing import Iterable, Optional

from salepdv.core.errors import Forbidden, InvalidTransition


class OrderStatus(str, enum.Enum):
    aguardando = "aguardando"
    em_preparo = "em_preparo"
    entregue = "entregue"
    cancelado = "cancelado"
    arquivado = "arquivado"


ACTIVE_STATUSES = frozenset({OrderStatus.aguardando.value, OrderStatus.em_preparo.value})
TERMINAL_STATUSES = frozenset({OrderStatus.cancelado.value, OrderStatus.arquivado.value})

ADMIN = "admin"
CLIENT = "client"

# (from, to) -> roles allowed to take the edge
TRANSITIONS = {
    ("aguardando", "em_preparo"): frozenset({ADMIN}),
    ("aguardando", "cancelado"): frozenset({ADMIN, CLIENT}),
    ("em_preparo", "entregue"): frozenset({ADMIN}),
    ("entregue", "arquivado"): frozenset({ADMIN}),
}

TABLE_OCCUPIED = "occupied"
TABLE_AVAILABLE = "available"


def role_value(role) -> Optional[str]:
    """Normalize a role given as RoleEnum, plain string or None."""
    if role is None:
        return None
    return role.value if hasattr(role, "value") else str(role)


def status_value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def allowed_targets(current) -> set:
    current = status_value(current)
    return {dst for (src, dst) in TRANSITIONS if src == current}


def is_active(status) -> bool:
    return status_value(status) in ACTIVE_STATUSES


def check_transition(current, target, requester_role, requester_id=None, owner_id=None) -> None:
    """Raise unless ``requester_role`` may move an order from ``current`` to ``target``.

    The preparation guards run before the edge lookup, so a client poking an
    order that is already being prepared always gets Forbidden, while any
    request leaving a terminal state is an InvalidTransition.
    """
    current = status_value(current)
    target = status_value(target)
    role = role_value(requester_role)
    is_admin = role == ADMIN

    if current == "em_preparo" and target != "em_preparo" and not is_admin:
        raise Forbidden("Apenas o dono do carrinho pode mudar o status de um pedido em preparo")
    if current == "aguardando" and target == "em_preparo" and not is_admin:
        raise Forbidden("Apenas o dono do carrinho pode iniciar o preparo do pedido")
    if current == "em_preparo" and role == CLIENT:
        raise Forbidden("Não é possível alterar um pedido que já está em preparo")

    roles = TRANSITIONS.get((current, target))
    if roles is None:
        raise InvalidTransition(current, target)
    if role not in roles:
        raise Forbidden("Apenas o dono do carrinho pode realizar esta alteração")
    if role == CLIENT and requester_id is not None and owner_id != requester_id:
        raise Forbidden("Este pedido pertence a outro cliente")


def occupancy_for(statuses: Iterable) -> str:
    """Table status implied by the statuses of the orders referencing it."""
    if any(is_active(s) for s in statuses):
        return TABLE_OCCUPIED
    return TABLE_AVAILABLE
