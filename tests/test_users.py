USERS_URL = "/api/v1/users"


def test_list_users_hides_password_hashes(client, admin_headers, employee_user):
    response = client.get(USERS_URL + "/", headers=admin_headers)

    assert response.status_code == 200
    users = response.json()
    assert [u["name"] for u in users] == ["Ama Mensah", "Kofi Boateng"]
    assert all("password_hash" not in u for u in users)


def test_list_users_by_role(client, admin_headers, employee_user):
    response = client.get(USERS_URL + "/", params={"role": "EMPLOYEE"}, headers=admin_headers)
    assert [u["employee_id"] for u in response.json()] == ["EMP-042"]


def test_users_admin_only(client, employee_headers):
    assert client.get(USERS_URL + "/", headers=employee_headers).status_code == 403


def test_delete_user_returns_remaining(client, admin_headers, employee_user):
    response = client.delete(f"{USERS_URL}/{employee_user['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert [u["employee_id"] for u in response.json()] == ["ADMIN001"]
    assert client.get(f"{USERS_URL}/{employee_user['id']}", headers=admin_headers).status_code == 404
