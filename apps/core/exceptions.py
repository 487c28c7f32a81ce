"""
Custom exceptions and exception handler
"""
from rest_framework.views import exception_handler
from rest_framework.exceptions import APIException
from rest_framework import status


class InvalidOperation(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid operation.'
    default_code = 'invalid_operation'


class InvalidTransition(InvalidOperation):
    default_detail = 'Invalid status transition.'
    default_code = 'invalid_transition'

    def __init__(self, from_status, to_status):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid status transition from {from_status} to {to_status}")


class BookingLocked(InvalidOperation):
    default_detail = 'This item is part of an active booking and cannot be changed.'
    default_code = 'booking_locked'


class ResourceConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource conflict.'
    default_code = 'resource_conflict'


class ProjectLocked(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'This project can no longer be modified.'
    default_code = 'project_locked'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that adds additional context
    """
    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(response.data, dict):
            message = response.data.get('detail', str(exc))
        elif isinstance(response.data, list) and response.data:
            message = response.data[0]
        else:
            message = str(exc)

        custom_response_data = {
            'error': True,
            'message': message,
            'status_code': response.status_code,
        }

        # Add field errors if present
        if isinstance(response.data, dict) and 'detail' not in response.data:
            custom_response_data['errors'] = response.data
            non_field = response.data.get('non_field_errors')
            if non_field:
                custom_response_data['message'] = non_field[0]

        response.data = custom_response_data

    return response
