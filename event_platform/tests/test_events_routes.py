from datetime import datetime

import psycopg2


def catalog_row(**overrides):
    row = {
        "event_id": 1,
        "name": "Test Event",
        "start_date": datetime(2025, 1, 1, 10, 0, 0),
        "end_date": datetime(2025, 1, 1, 12, 0, 0),
        "description": "Desc",
        "thumbnail": None,
        "seat_capacity": 50,
        "registered_count": 12,
        "location_name": "Hall",
        "postal_code": "64000",
        "city_name": "Pau",
        "organizer_name": "Org A, Org B",
    }
    row.update(overrides)
    return row


def test_list_events_anonymous(client, mock_db):
    _, _, mock_cursor = mock_db
    mock_cursor.fetchall.return_value = [catalog_row()]

    response = client.get("/events/")

    assert response.status_code == 200
    data = response.get_json()
    assert len(data) == 1
    assert data[0]["remaining_seats"] == 38
    assert data[0]["organizer_name"] == "Org A, Org B"
    assert "is_viewer_registered" not in data[0]
    assert mock_cursor.execute.call_args[0][1] == []


def test_list_events_logged_in(client, mock_db, auth_header):
    _, _, mock_cursor = mock_db
    mock_cursor.fetchall.return_value = [catalog_row(is_viewer_registered=True)]

    response = client.get("/events/", headers=auth_header(7))

    assert response.status_code == 200
    assert response.get_json()[0]["is_viewer_registered"] is True
    assert mock_cursor.execute.call_args[0][1] == [7]


def test_list_events_bad_token_is_anonymous(client, mock_db):
    _, _, mock_cursor = mock_db
    mock_cursor.fetchall.return_value = []

    response = client.get("/events/", headers={"Authorization": "Bearer not.a.token"})

    assert response.status_code == 200
    assert mock_cursor.execute.call_args[0][1] == []


def test_get_event_success(client, mock_db):
    _, _, mock_cursor = mock_db
    mock_cursor.fetchone.return_value = catalog_row(event_id=5)

    response = client.get("/events/5")

    assert response.status_code == 200
    assert response.get_json()["event_id"] == 5
    assert response.get_json()["start_date"] == "2025-01-01T10:00:00"


def test_get_event_not_found(client, mock_db):
    _, _, mock_cursor = mock_db
    mock_cursor.fetchone.return_value = None

    response = client.get("/events/999")

    assert response.status_code == 404
    assert response.get_json()["error"] == "Event not found"


def test_list_events_database_error(client, mock_db):
    _, _, mock_cursor = mock_db
    mock_cursor.execute.side_effect = psycopg2.OperationalError("connection refused")

    response = client.get("/events/")

    assert response.status_code == 500
    assert response.get_json()["error"] == "Failed to retrieve events"
