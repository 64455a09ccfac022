"""API Gateway (Lambda proxy) response builders."""

import json

from idemshort.types import HttpHeaders, LambdaResponse
from idemshort.constants import UNKNOWN_INTERNAL_SERVER_ERROR


# TODO: restrict Access-Control-Allow-Origin to the frontend domain once it is deployed
CORS_HEADERS: HttpHeaders = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Content-Type',
    'Access-Control-Allow-Methods': 'OPTIONS,POST,GET',
}


def _response(status_code: int, body: dict, headers: HttpHeaders | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **CORS_HEADERS, **(headers or {})},
        'body': json.dumps(body),
    }


def response_200(body: dict, headers: HttpHeaders | None = None) -> LambdaResponse:
    return _response(200, body, headers)


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {'Location': location, **CORS_HEADERS},
        'body': json.dumps({}),  # no body needed for redirects
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Bad Request'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return _response(400, body)


def response_404(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Not Found'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return _response(404, body)


def response_500(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Internal Server Error'
    body = {
        'message': base if not message else f'{base} ({message})',
        'errorCode': error_code or UNKNOWN_INTERNAL_SERVER_ERROR,
    }
    return _response(500, body)
