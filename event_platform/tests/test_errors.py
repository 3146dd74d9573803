from event_platform.errors import DomainError, EventFull, InternalFailure


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_unknown_route_keeps_404(client):
    response = client.get("/no-such-thing")
    assert response.status_code == 404
    assert "error" in response.get_json()


def test_unexpected_exception_is_opaque(client, mocker):
    mocker.patch(
        "event_platform.events_service.availability.SeatAvailabilityAggregator.list_events",
        side_effect=KeyError("secret internals"),
    )

    response = client.get("/events/")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal server error"}


def test_status_codes():
    assert EventFull().status_code == 409
    assert InternalFailure("x").status_code == 500
    assert DomainError("custom", 418).status_code == 418


def test_wrong_method_keeps_allow_header(client):
    response = client.post("/health")

    assert response.status_code == 405
    assert "GET" in response.headers["Allow"]
    assert response.is_json
    assert "error" in response.get_json()
