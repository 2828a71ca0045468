"""
Console-style entrypoint: Lambda handler setting `lambda_function.lambda_handler`.

The function code lives in `lambdas/submit/app.py`; this module only re-exports it
so the zip can be deployed with the default handler name.
"""
from lambdas.submit.app import handler as lambda_handler

__all__ = ["lambda_handler"]
