"""Mappers cable <-> UI.

Por qué:
- Funciones puras y totales: sin I/O y sin excepciones por campos ausentes.
- Son el único punto de verdad del valor por defecto de cada campo; los
  servicios los consumen, las vistas nunca los llaman directamente.
"""
