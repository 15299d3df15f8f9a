"""
Errores del Dominio de Inventario
=================================

Taxonomía común a repositorios y servicios:
- RecursoNoEncontradoError: id inexistente o inactivo cuando se exige activo
- ArgumentoInvalidoError: cantidades o mínimos fuera de rango
- StockInsuficienteError: la operación pide más de lo disponible
- BackendNoDisponibleError: falla de la base de datos (la causa original va en __cause__)
"""
from decimal import Decimal


class InventarioError(Exception):
    """Error base del inventario"""
    pass


class RecursoNoEncontradoError(InventarioError):
    def __init__(self, recurso: str, identificador):
        self.recurso = recurso
        self.identificador = identificador
        super().__init__(f"{recurso} {identificador} no encontrado")


class ProductoNoEncontradoError(RecursoNoEncontradoError):
    def __init__(self, producto_id, tipo_inventario: str = "general"):
        self.tipo_inventario = tipo_inventario
        super().__init__(f"Producto ({tipo_inventario})", producto_id)


class NegocioNoEncontradoError(RecursoNoEncontradoError):
    def __init__(self, negocio_id):
        super().__init__("Negocio", negocio_id)


class MovimientoNoEncontradoError(RecursoNoEncontradoError):
    def __init__(self, movimiento_id):
        super().__init__("Movimiento", movimiento_id)


class NotificacionNoEncontradaError(RecursoNoEncontradoError):
    def __init__(self, notificacion_id):
        super().__init__("Notificación", notificacion_id)


class ConfiguracionNoEncontradaError(RecursoNoEncontradoError):
    def __init__(self, clave: str):
        super().__init__("Configuración", clave)


class ArgumentoInvalidoError(InventarioError):
    """Parámetro fuera del contrato (cantidad <= 0, stock negativo, etc.)"""
    pass


class StockInsuficienteError(InventarioError):
    """Se solicitó más stock del disponible"""
    def __init__(self, disponible: Decimal, solicitado: Decimal, contexto: str = "inventario general"):
        self.disponible = disponible
        self.solicitado = solicitado
        super().__init__(f"Stock insuficiente en {contexto}. Disponible: {_fmt(disponible)}")


class BackendNoDisponibleError(InventarioError):
    """La base de datos no respondió; mensaje genérico para el usuario"""
    def __init__(self, mensaje: str = "El servicio de datos no está disponible. Intente nuevamente."):
        super().__init__(mensaje)


def _fmt(valor) -> str:
    return format(Decimal(str(valor)).normalize(), "f")
