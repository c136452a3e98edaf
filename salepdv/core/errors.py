"""Application errors raised by the order/table lifecycle services.

Every error is terminal for the request that triggered it: nothing here is
retried. The HTTP layer renders them through a single exception handler
using ``status_code`` and ``detail``.
"""


class LifecycleError(Exception):
    status_code = 400
    default_detail = "Operação inválida"

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Forbidden(LifecycleError):
    status_code = 403
    default_detail = "Acesso negado"


class InvalidTransition(LifecycleError):
    status_code = 409
    default_detail = "Transição de status inválida"

    def __init__(self, current=None, target=None, detail=None):
        self.current = current
        self.target = target
        if detail is None and current is not None:
            detail = f"Transição de status inválida: {current} -> {target}"
        super().__init__(detail)


class DuplicateActiveTable(LifecycleError):
    status_code = 400
    default_detail = (
        "Você já tem pedidos ativos em outra mesa. "
        "Por favor, continue usando a mesma mesa para seus pedidos."
    )


class InvalidQuantity(LifecycleError):
    status_code = 400
    default_detail = "Quantidade inválida"


class NotFound(LifecycleError):
    status_code = 404
    default_detail = "Registro não encontrado"


class DuplicateTableNumber(LifecycleError):
    status_code = 409
    default_detail = "Já existe uma mesa com esse número"


class TableInUse(LifecycleError):
    status_code = 409
    default_detail = "A mesa possui pedidos ativos"
