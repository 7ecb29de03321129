"""
Módulo de cajas registradoras

Cada tienda alterna entre caja cerrada y abierta. Al cerrar se hace el arqueo:

    esperado   = apertura + ventas del turno - gastos del turno
    diferencia = contado - esperado

Una diferencia positiva es sobrante y una negativa es faltante. Las cajas
cerradas no se modifican ni se eliminan.
"""
