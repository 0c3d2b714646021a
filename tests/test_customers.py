"""
Unit tests for customer management functionality
"""

import asyncio
from datetime import datetime

import pytest

from tailoring.models.customer import Customer
from tailoring.models.measurement import Measurement
from tailoring.services.customer_service import CustomerService
from tailoring.utils.error_handler import NotFound, ValidationFailure
from conftest import order_payload

def customer_payload(**overrides):
    payload = {
        "firstName": "Jane",
        "lastName": "Smith",
        "email": "jane.smith@email.com",
        "phone": "+1987654321",
        "address": "12 Savile Row",
    }
    payload.update(overrides)
    return payload

class TestCustomerCreation:
    """Test cases for customer creation"""

    def test_create_customer(self, client, admin_headers):
        response = client.post("/api/customers", json=customer_payload(), headers=admin_headers)
        assert response.status_code == 201

        data = response.json()
        assert data["firstName"] == "Jane"
        assert data["email"] == "jane.smith@email.com"
        assert data["address"] == "12 Savile Row"
        assert response.headers["location"].endswith(f"/api/customers/{data['id']}")

    def test_create_customer_duplicate_email(self, client, admin_headers, make_customer):
        make_customer(email="jane.smith@email.com")

        response = client.post(
            "/api/customers", json=customer_payload(email="Jane.Smith@Email.com"), headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Email already exists"

    def test_create_customer_missing_name(self, client, admin_headers):
        payload = customer_payload()
        del payload["lastName"]

        response = client.post("/api/customers", json=payload, headers=admin_headers)
        assert response.status_code == 400
        assert any("lastName" in error for error in response.json()["errors"])

    def test_customer_role_cannot_create(self, client, customer_headers):
        response = client.post("/api/customers", json=customer_payload(), headers=customer_headers)
        assert response.status_code == 403

class TestCustomerRetrieval:
    """Test cases for reading customers"""

    def test_list_customers(self, client, admin_headers, make_customer):
        make_customer()
        make_customer(first_name="Ann", last_name="Adams", email="ann@email.com")

        response = client.get("/api/customers", headers=admin_headers)
        assert response.status_code == 200
        assert [c["lastName"] for c in response.json()] == ["Adams", "Doe"]

    def test_list_requires_admin(self, client, customer_headers):
        response = client.get("/api/customers", headers=customer_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Operation not permitted"

    def test_list_requires_token(self, client):
        assert client.get("/api/customers").status_code == 401

    def test_get_customer_any_role(self, client, customer_headers, make_customer):
        customer = make_customer()

        response = client.get(f"/api/customers/{customer.id}", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "john.doe@email.com"

    def test_get_nonexistent_customer(self, client, admin_headers):
        response = client.get("/api/customers/999", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Customer not found"

    def test_get_customer_measurements(self, client, admin_headers, make_customer):
        customer = make_customer()
        client.post("/api/orders", json=order_payload(customerId=customer.id, chest=40.5), headers=admin_headers)

        response = client.get(f"/api/customers/{customer.id}/measurements", headers=admin_headers)
        assert response.status_code == 200

        measurements = response.json()
        assert len(measurements) == 1
        assert measurements[0]["chest"] == 40.5
        assert measurements[0]["inseam"] == 0
        assert measurements[0]["measurementType"] == "Suit"

    def test_measurements_of_unknown_customer(self, client, admin_headers):
        assert client.get("/api/customers/999/measurements", headers=admin_headers).status_code == 404

class TestCustomerUpdates:
    """Test cases for updating and deleting customers"""

    def test_update_customer_partial(self, client, admin_headers, make_customer, db_session):
        customer = make_customer()

        response = client.put(
            f"/api/customers/{customer.id}", json={"phone": "+1000000000"}, headers=admin_headers
        )
        assert response.status_code == 204
        assert response.content == b""

        db_session.expire_all()
        updated = db_session.query(Customer).filter(Customer.id == customer.id).one()
        assert updated.phone == "+1000000000"
        assert updated.first_name == "John"
        assert updated.updated_at is not None

    def test_update_to_taken_email(self, client, admin_headers, make_customer):
        make_customer(email="ann@email.com")
        customer = make_customer()

        response = client.put(
            f"/api/customers/{customer.id}", json={"email": "ann@email.com"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_update_keeping_own_email(self, client, admin_headers, make_customer):
        customer = make_customer()
        response = client.put(
            f"/api/customers/{customer.id}", json={"email": "john.doe@email.com"}, headers=admin_headers
        )
        assert response.status_code == 204

    def test_update_nonexistent_customer(self, client, admin_headers):
        response = client.put("/api/customers/999", json={"phone": "1"}, headers=admin_headers)
        assert response.status_code == 404

    def test_customer_role_cannot_update(self, client, customer_headers, make_customer):
        customer = make_customer()
        response = client.put(f"/api/customers/{customer.id}", json={"phone": "1"}, headers=customer_headers)
        assert response.status_code == 403

    def test_delete_customer_removes_measurements(self, client, admin_headers, make_customer, db_session):
        customer = make_customer()
        db_session.add(Measurement(customer_id=customer.id, measurement_type="Shirt", taken_on=datetime(2026, 1, 1)))
        db_session.commit()

        response = client.delete(f"/api/customers/{customer.id}", headers=admin_headers)
        assert response.status_code == 204

        assert client.get(f"/api/customers/{customer.id}", headers=admin_headers).status_code == 404
        assert db_session.query(Measurement).count() == 0

    def test_delete_customer_with_orders_fails(self, client, admin_headers, make_customer, make_order):
        customer = make_customer()
        make_order(customer)

        response = client.delete(f"/api/customers/{customer.id}", headers=admin_headers)
        assert response.status_code == 400
        assert "order" in response.json()["message"]
        assert response.json()["errors"] == [f"orders: customer {customer.id} still has 1 order(s)"]
        assert client.get(f"/api/customers/{customer.id}", headers=admin_headers).status_code == 200

    def test_delete_unknown_customer_is_silent(self, client, admin_headers):
        assert client.delete("/api/customers/999", headers=admin_headers).status_code == 204

class TestCustomerService:
    """Test cases calling the service directly"""

    def test_update_rejects_null_name(self, db_session, make_customer):
        from tailoring.schemas.customer import CustomerUpdate

        customer = make_customer()
        with pytest.raises(ValidationFailure):
            asyncio.run(CustomerService(db_session).update_customer(customer.id, CustomerUpdate(first_name=None)))

    def test_measurements_for_missing_customer(self, db_session):
        with pytest.raises(NotFound):
            asyncio.run(CustomerService(db_session).get_customer_measurements(42))
