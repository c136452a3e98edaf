"""Single authorization predicate for cart owners and customers.

Routes call ``authorize`` once per operation and ``enforce`` the result.
List endpoints still scope their queries by seller or user themselves.
"""
from dataclasses import dataclass
from typing import Union

from salepdv.core.errors import Forbidden
from salepdv.services.order_status import ADMIN, CLIENT, role_value


class Allow:
    def __bool__(self):
        return True

    def __repr__(self):
        return "Allow"


ALLOW = Allow()


@dataclass(frozen=True)
class Deny:
    reason: str

    def __bool__(self):
        return False


Decision = Union[Allow, Deny]

# actions restricted to the cart owner, checked against entity.seller_id
SELLER_ACTIONS = {"table.manage", "product.manage", "order.transition", "order.pay", "stats.view"}
# actions a client may take on orders they placed
CLIENT_ORDER_ACTIONS = {"order.edit", "order.delete", "order.view", "order.transition"}


def _owner_of(entity):
    return getattr(entity, "seller_id", None)


def authorize(user, action: str, entity=None) -> Decision:
    if user is None:
        return Deny("Não autenticado")
    role = role_value(getattr(user, "papel", None))

    if action == "user.delete" and entity is not None and getattr(entity, "id", None) == user.id:
        return ALLOW

    if action in ("users.manage", "user.delete"):
        if role != ADMIN:
            return Deny("Apenas administradores podem gerenciar usuários")
        # entity is the managed user: the admin themself or a customer of their cart
        if entity is None or entity.id == user.id or getattr(entity, "seller_id", None) == user.id:
            return ALLOW
        return Deny("Este usuário pertence a outro carrinho")

    if action == "order.create":
        return ALLOW if role in (ADMIN, CLIENT) else Deny("Papel sem permissão para criar pedidos")

    if action == "orders.history":
        # entity is the user whose history is requested
        if role == ADMIN:
            return ALLOW
        if entity is not None and getattr(entity, "id", entity) == user.id:
            return ALLOW
        return Deny("Você só pode ver o seu próprio histórico")

    if role == ADMIN:
        if action in SELLER_ACTIONS or action in CLIENT_ORDER_ACTIONS:
            if entity is None or _owner_of(entity) in (None, user.id):
                return ALLOW
            return Deny("Este registro pertence a outro carrinho")
        return Deny(f"Ação desconhecida: {action}")

    if role == CLIENT:
        if action in CLIENT_ORDER_ACTIONS:
            if entity is not None and getattr(entity, "user_id", None) != user.id:
                return Deny("Este pedido pertence a outro cliente")
            return ALLOW
        return Deny("Apenas o dono do carrinho pode realizar esta ação")

    return Deny("Papel desconhecido")


def enforce(decision: Decision) -> None:
    if isinstance(decision, Deny):
        raise Forbidden(decision.reason)


def seller_scope(user):
    """Seller whose catalog and tables a user works against (None when unbound)."""
    if role_value(getattr(user, "papel", None)) == ADMIN:
        return user.id
    return getattr(user, "seller_id", None)


def resolve_seller(user, requested=None):
    """Seller to act against: a bound user's own cart, else the requested one.

    A user bound to a cart (an admin, or a client registered against one)
    cannot point a request at another cart.
    """
    bound = seller_scope(user)
    if bound is None:
        return requested
    if requested is not None and requested != bound:
        raise Forbidden("Você está vinculado a outro carrinho")
    return bound
