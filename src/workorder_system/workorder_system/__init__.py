"""Work Order System package.

This package is organized by feature modules (works, qr, workers, accounts, ...)
with a thin Flask controller layer and SOLID service/repository layers.
"""
