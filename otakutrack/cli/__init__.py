"""
Presentation Layer.

The Typer application and the Rich renderers it uses. Commands only call the
public operations of the catalog client and the progress store.
"""
