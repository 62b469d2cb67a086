"""Domain layer for kakeibo application.

Services are imported from their modules (e.g. ``kakeibo.domain.ledger``);
this package stays import-light so the database layer can depend on
``kakeibo.domain.entities`` without cycles.
"""
