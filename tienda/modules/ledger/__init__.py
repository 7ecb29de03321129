"""
Módulo de libro de caja (ledger)

ENTIDADES:
- CashMovement: registro inmutable por evento financiero (apertura, venta,
  abono de separado, gasto, cierre)

COMPONENTES:
- store.LedgerStore: registro append-only, sin edición ni borrado
- recorder: funciones puras evento -> CashMovement
- service.CashMovementService: movimientos manuales, consulta con resumen y exportación CSV

CONVENCIÓN DE SIGNOS:
- Ingresos (apertura, venta, abono) positivos
- Gastos negativos
- Cierre con monto 0 (informativo)
"""
