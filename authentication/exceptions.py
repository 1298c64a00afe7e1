# exceptions.py
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.db.models import ProtectedError
import logging
from django.conf import settings

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    400: 'Validation error',
    401: 'Authentication required',
    403: 'Permission denied',
    404: 'Resource not found',
    405: 'Method not allowed',
    500: 'Internal server error',
}


def error_payload(message, details, status_code):
    return {
        'error': True,
        'message': message,
        'details': details,
        'status_code': status_code,
    }


def custom_exception_handler(exc, context):
    """
    Wrap every API error in the same envelope: error, message, details, status_code
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        message = STATUS_MESSAGES.get(response.status_code, 'An error occurred')
        response.data = error_payload(message, response.data, response.status_code)
        return response

    # Handle Django ValidationError raised from model code
    if isinstance(exc, ValidationError):
        logger.warning("Validation Error: %s", exc)
        return Response(
            error_payload('Validation error', {'non_field_errors': exc.messages}, 400),
            status=status.HTTP_400_BAD_REQUEST,
        )

    # Deleting a row that order history still points to
    if isinstance(exc, ProtectedError):
        logger.warning("Protected delete refused: %s", exc)
        return Response(
            error_payload(
                'Resource is still referenced',
                {'error': 'This record is used by order or stock history and cannot be deleted'},
                400,
            ),
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, IntegrityError):
        logger.error("Integrity Error: %s", exc)
        return Response(
            error_payload(
                'Database integrity error',
                {'error': 'This operation violates database constraints'},
                400,
            ),
            status=status.HTTP_400_BAD_REQUEST,
        )

    logger.exception("Unexpected Error: %s", exc)
    return Response(
        error_payload(
            'An unexpected error occurred',
            {'error': str(exc)} if settings.DEBUG else {},
            500,
        ),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
