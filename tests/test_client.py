"""Tests for ApiClient requests and error classification."""
from decimal import Decimal

import httpx
import pytest

from storefront.client import ApiClient
from storefront.controllers.base import LoadState
from storefront.errors import (
    ApiError, Forbidden, NetworkError, ServerError, Unauthorized, classify_status,
)
from storefront.schemas import OrderLine, ProductDraft
from storefront.security import AuthGate

from .conftest import FakeSession


def _client(handler) -> ApiClient:
    http = httpx.AsyncClient(base_url='http://shop.test', transport=httpx.MockTransport(handler))
    return ApiClient(http, AuthGate(FakeSession()))


@pytest.mark.parametrize(
    ('status', 'error_type', 'message'),
    [
        (401, Unauthorized, 'Unauthorized (401)'),
        (403, Forbidden, 'Access Denied (403)'),
        (500, ServerError, 'Error: 500'),
        (404, ServerError, 'Error: 404'),
        (502, ServerError, 'Error: 502'),
    ],
)
@pytest.mark.asyncio
async def test_failed_status_is_classified(status, error_type, message):
    api = _client(lambda request: httpx.Response(status, json={'detail': 'nope'}))

    with pytest.raises(error_type) as excinfo:
        await api.list_products()

    assert str(excinfo.value) == message
    assert excinfo.value.status_code == status
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)
    await api.http.aclose()


@pytest.mark.asyncio
async def test_connection_error_is_network_error():
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    api = _client(handler)

    with pytest.raises(NetworkError) as excinfo:
        await api.list_orders()

    assert str(excinfo.value) == 'Network Error'
    assert excinfo.value.status_code is None
    await api.http.aclose()


def test_classify_status():
    assert isinstance(classify_status(401), Unauthorized)
    assert isinstance(classify_status(403), Forbidden)
    error = classify_status(500)
    assert isinstance(error, ServerError)
    assert '500' in str(error)
    assert all(isinstance(classify_status(s), ApiError) for s in (400, 401, 403, 500))


@pytest.mark.asyncio
async def test_list_products_parses_backend_json(store):
    products = await store.api.list_products()

    assert [p.id for p in products] == [1, 3, 5, 7]
    assert products[0].name == 'Keyboard'
    assert products[0].price == Decimal('49.5')
    assert products[3].description == ''


@pytest.mark.asyncio
async def test_every_call_carries_bearer_token(store, session, backend_state):
    await store.api.list_products()
    await store.api.list_orders()

    assert [r[2] for r in backend_state.requests] == [f'Bearer {session.token}'] * 2


@pytest.mark.asyncio
async def test_create_order_payload(store, backend_state):
    await store.api.create_order([
        OrderLine(product_id=3, quantity=2),
        OrderLine(product_id=7, quantity=1),
    ])

    assert backend_state.bodies[-1] == {
        'orderLines': [
            {'productId': 3, 'quantity': 2},
            {'productId': 7, 'quantity': 1},
        ]
    }


@pytest.mark.asyncio
async def test_create_product_payload(admin_store, backend_state):
    draft = ProductDraft(name='Lamp', price=Decimal('12.50'), quantity=3, description='Desk')

    await admin_store.api.create_product(draft)

    assert backend_state.bodies[-1] == {
        'name': 'Lamp', 'price': 12.5, 'quantity': 3, 'description': 'Desk',
    }


@pytest.mark.asyncio
async def test_get_and_update_product(admin_store):
    await admin_store.api.update_product(
        3, ProductDraft(name='Mouse Pro', price=Decimal('29'), quantity=5)
    )

    product = await admin_store.api.get_product(3)
    assert product.name == 'Mouse Pro'
    assert product.price == Decimal('29')


@pytest.mark.asyncio
async def test_missing_order_is_server_error(store):
    with pytest.raises(ServerError) as excinfo:
        await store.api.get_order(42)
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_invalid_token_is_unauthorized(make_store):
    forged = make_store(FakeSession(secret='not-the-backend-key'))

    with pytest.raises(Unauthorized):
        await forged.api.list_products()


@pytest.mark.asyncio
async def test_admin_endpoint_forbidden_for_user(store):
    with pytest.raises(Forbidden):
        await store.api.delete_product(5)


@pytest.mark.parametrize(
    'body',
    [
        [{'id': 1, 'totalAmount': None}],
        {'unexpected': 'shape'},
        42,
    ],
)
@pytest.mark.asyncio
async def test_unexpected_body_is_server_error(body):
    api = _client(lambda request: httpx.Response(200, json=body))

    with pytest.raises(ServerError) as excinfo:
        await api.list_orders()

    assert excinfo.value.status_code == 200
    await api.http.aclose()


@pytest.mark.asyncio
async def test_non_json_body_is_server_error():
    api = _client(lambda request: httpx.Response(200, text='<html>maintenance</html>'))

    with pytest.raises(ServerError):
        await api.list_products()
    await api.http.aclose()


@pytest.mark.asyncio
async def test_unexpected_body_keeps_controller_alive(make_store, session):
    broken = make_store(session, transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json=[{'id': 1, 'totalAmount': None}])))

    assert await broken.orders.refresh() is False

    assert broken.orders.state is LoadState.ERROR
    assert broken.view.banner.message == 'Error: 200'
    assert broken.orders.orders == []
