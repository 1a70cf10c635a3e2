import httpx
import pytest
from fastapi import status
from fastapi.encoders import jsonable_encoder
import datetime as dt
from tasker_api import __version__, __service_name__
from app.model.auth import AuthResponse
from app.model.task import Task
from app.model.user import User
from .conftest import PASSWORD, get_url, new_test_task


async def create_task_via_api(
    test_client: httpx.AsyncClient, headers, assigned_to_id=None, **kwargs
) -> Task:
    pay_load = jsonable_encoder(
        new_test_task(assigned_to_id=assigned_to_id, **kwargs), exclude_none=True
    )
    response = await test_client.post(get_url("tasks"), json=pay_load, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    return Task(**response.json())


@pytest.mark.asyncio
class TestInfo:
    async def test_version(self):
        assert __version__ == "0.1.0"

    async def test_ping(self, test_client: httpx.AsyncClient):
        pre_time = dt.datetime.now().replace(microsecond=0)
        response = await test_client.get(get_url("ping"))
        assert response.status_code == status.HTTP_200_OK

        ping_str = response.json().get("ping", None)
        assert ping_str is not None
        post_time = dt.datetime.strptime(ping_str, "%Y-%m-%d %H:%M:%S")
        dur_secs = (post_time - pre_time).total_seconds()
        assert 0 <= dur_secs < 2

    async def test_read_info(self, test_client: httpx.AsyncClient):
        response = await test_client.get(get_url("info"))
        assert response.status_code == status.HTTP_200_OK
        response_body = response.json()
        assert response_body["service"] == __service_name__
        assert response_body["version"] == __version__
        assert response_body["data_source"] == "in-memory"


@pytest.mark.asyncio
class TestAuth:
    async def test_register_login_refresh(self, test_client: httpx.AsyncClient):
        response = await test_client.post(
            get_url("auth/register"),
            json={"email": "new@tasker.com", "first_name": "New", "password": PASSWORD},
        )
        assert response.status_code == status.HTTP_201_CREATED
        registered = AuthResponse(**response.json())
        assert registered.user.role == "USER"
        assert "password_hash" not in response.json()["user"]

        response = await test_client.post(
            get_url("auth/login"),
            json={"email": "new@tasker.com", "password": PASSWORD},
        )
        assert response.status_code == status.HTTP_200_OK
        logged_in = AuthResponse(**response.json())

        response = await test_client.get(
            get_url("auth/me"), headers={"Authorization": f"Bearer {logged_in.token}"}
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == "new@tasker.com"

        response = await test_client.post(
            get_url("auth/refresh"), json={"refresh_token": logged_in.refresh_token}
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["token"]

    async def test_register_validation(self, test_client: httpx.AsyncClient):
        response = await test_client.post(
            get_url("auth/register"),
            json={"email": "not-an-email", "first_name": "New", "password": "123"},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_register_duplicate(self, test_client: httpx.AsyncClient, users):
        response = await test_client.post(
            get_url("auth/register"),
            json={"email": "user@tasker.com", "first_name": "Dup", "password": PASSWORD},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "User with this email already exists"

    async def test_login_bad_password(self, test_client: httpx.AsyncClient, users):
        response = await test_client.post(
            get_url("auth/login"),
            json={"email": "user@tasker.com", "password": "wrong-password"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid email or password"

    async def test_refresh_bad_token(self, test_client: httpx.AsyncClient):
        response = await test_client.post(
            get_url("auth/refresh"), json={"refresh_token": "garbage"}
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid refresh token"

    async def test_missing_token(self, test_client: httpx.AsyncClient):
        response = await test_client.get(get_url("tasks"))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["detail"] == "Access token is required"

    async def test_bad_token(self, test_client: httpx.AsyncClient):
        response = await test_client.get(
            get_url("tasks"), headers={"Authorization": "Bearer garbage"}
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid or expired token"

    async def test_logout(self, test_client: httpx.AsyncClient, headers):
        response = await test_client.post(get_url("auth/logout"), headers=headers.user)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Logout successful"


@pytest.mark.asyncio
class TestUsers:
    async def test_profile(self, test_client: httpx.AsyncClient, users, headers):
        response = await test_client.put(
            get_url("users/profile"), json={"last_name": "Smith"}, headers=headers.user
        )
        assert response.status_code == status.HTTP_200_OK
        profile = User(**response.json())
        assert profile.id == users.user.id
        assert profile.last_name == "Smith"

    async def test_change_password(self, test_client: httpx.AsyncClient, headers):
        response = await test_client.post(
            get_url("users/change-password"),
            json={"current_password": "wrong", "new_password": "newsecret"},
            headers=headers.user,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        response = await test_client.post(
            get_url("users/change-password"),
            json={"current_password": PASSWORD, "new_password": "newsecret"},
            headers=headers.user,
        )
        assert response.status_code == status.HTTP_200_OK

    async def test_admin_only(self, test_client: httpx.AsyncClient, headers):
        for role_headers in (headers.manager, headers.user):
            response = await test_client.get(get_url("users"), headers=role_headers)
            assert response.status_code == status.HTTP_403_FORBIDDEN

        response = await test_client.get(get_url("users"), headers=headers.admin)
        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()) == 4

    async def test_admin_manages_users(self, test_client: httpx.AsyncClient, headers):
        response = await test_client.post(
            get_url("users"),
            json={
                "email": "boss@tasker.com",
                "first_name": "Boss",
                "password": PASSWORD,
                "role": "MANAGER",
            },
            headers=headers.admin,
        )
        assert response.status_code == status.HTTP_201_CREATED
        user = User(**response.json())
        assert user.role == "MANAGER"

        response = await test_client.patch(
            get_url(f"users/{user.id}/role"), json={"role": "ADMIN"}, headers=headers.admin
        )
        assert response.json()["role"] == "ADMIN"

        response = await test_client.patch(
            get_url(f"users/{user.id}/status"),
            json={"is_active": False},
            headers=headers.admin,
        )
        assert response.json()["is_active"] is False

        response = await test_client.post(
            get_url("auth/login"),
            json={"email": "boss@tasker.com", "password": PASSWORD},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_deleted_user_token_rejected(
        self, test_client: httpx.AsyncClient, users, headers
    ):
        response = await test_client.delete(
            get_url(f"users/{users.other.id}"), headers=headers.admin
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_active"] is False

        response = await test_client.get(get_url("tasks"), headers=headers.other)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "User account is inactive"

    async def test_user_not_found(self, test_client: httpx.AsyncClient, headers):
        response = await test_client.get(get_url("users/999"), headers=headers.admin)
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
class TestTasks:
    BAD_ID = 999

    async def test_create_get_delete(self, test_client: httpx.AsyncClient, users, headers):
        task = await create_task_via_api(
            test_client, headers.manager, assigned_to_id=users.user.id
        )
        assert task.created_by == users.manager.id
        assert task.status == "PENDING"

        response = await test_client.get(
            get_url(f"tasks/{task.id}"), headers=headers.user
        )
        assert response.status_code == status.HTTP_200_OK
        assert Task(**response.json()) == task

        response = await test_client.delete(
            get_url(f"tasks/{task.id}"), headers=headers.manager
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Only ADMIN can delete tasks"

        response = await test_client.delete(
            get_url(f"tasks/{task.id}"), headers=headers.admin
        )
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = await test_client.get(
            get_url(f"tasks/{task.id}"), headers=headers.admin
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == f"Task with id {task.id} not found"

    async def test_user_cannot_create(self, test_client: httpx.AsyncClient, headers):
        response = await test_client.post(
            get_url("tasks"), json={"title": "Mine"}, headers=headers.user
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_create_bad_task(self, test_client: httpx.AsyncClient, headers):
        response = await test_client.post(
            get_url("tasks"), json={"title": ""}, headers=headers.admin
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_list_is_scoped(self, test_client: httpx.AsyncClient, users, headers):
        mine = await create_task_via_api(
            test_client, headers.admin, assigned_to_id=users.user.id
        )
        await create_task_via_api(
            test_client, headers.admin, assigned_to_id=users.other.id
        )

        response = await test_client.get(get_url("tasks"), headers=headers.user)
        assert [t["id"] for t in response.json()] == [mine.id]

        response = await test_client.get(get_url("tasks"), headers=headers.admin)
        assert len(response.json()) == 2

        response = await test_client.get(
            get_url("tasks"), params={"status": "COMPLETED"}, headers=headers.admin
        )
        assert response.json() == []

    async def test_user_update_is_narrowed(
        self, test_client: httpx.AsyncClient, users, headers
    ):
        task = await create_task_via_api(
            test_client, headers.manager, assigned_to_id=users.user.id
        )
        response = await test_client.put(
            get_url(f"tasks/{task.id}"),
            json={"title": "Hijacked", "priority": "URGENT", "status": "IN_PROGRESS"},
            headers=headers.user,
        )
        assert response.status_code == status.HTTP_200_OK
        updated = Task(**response.json())
        assert updated.status == "IN_PROGRESS"
        assert updated.title == task.title
        assert updated.priority == task.priority

    async def test_other_user_forbidden(
        self, test_client: httpx.AsyncClient, users, headers
    ):
        task = await create_task_via_api(
            test_client, headers.admin, assigned_to_id=users.user.id
        )
        response = await test_client.get(
            get_url(f"tasks/{task.id}"), headers=headers.other
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        response = await test_client.patch(
            get_url(f"tasks/{task.id}/status"),
            json={"status": "COMPLETED"},
            headers=headers.other,
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_patch_endpoints(self, test_client: httpx.AsyncClient, users, headers):
        task = await create_task_via_api(test_client, headers.admin)

        response = await test_client.patch(
            get_url(f"tasks/{task.id}/priority"),
            json={"priority": "HIGH"},
            headers=headers.manager,
        )
        assert response.json()["priority"] == "HIGH"

        response = await test_client.patch(
            get_url(f"tasks/{task.id}/due-date"),
            json={"due_date": "2030-01-31T17:00:00"},
            headers=headers.manager,
        )
        assert response.json()["due_date"] == "2030-01-31T17:00:00"

        response = await test_client.patch(
            get_url(f"tasks/{task.id}/assign"),
            json={"assignee_id": users.user.id},
            headers=headers.manager,
        )
        assert response.json()["assigned_to_id"] == users.user.id

        response = await test_client.patch(
            get_url(f"tasks/{task.id}/status"),
            json={"status": "COMPLETED"},
            headers=headers.user,
        )
        assert response.json()["status"] == "COMPLETED"

        response = await test_client.patch(
            get_url(f"tasks/{task.id}/priority"),
            json={"priority": "LOW"},
            headers=headers.user,
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_assign_unknown_user(self, test_client: httpx.AsyncClient, headers):
        task = await create_task_via_api(test_client, headers.admin)
        response = await test_client.patch(
            get_url(f"tasks/{task.id}/assign"),
            json={"assignee_id": self.BAD_ID},
            headers=headers.admin,
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

        response = await test_client.get(
            get_url(f"tasks/{task.id}"), headers=headers.admin
        )
        assert response.json()["assigned_to_id"] == task.assigned_to_id

    async def test_missing_task_before_permission(
        self, test_client: httpx.AsyncClient, headers
    ):
        response = await test_client.put(
            get_url(f"tasks/{self.BAD_ID}"), json={"title": "x"}, headers=headers.user
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

        response = await test_client.delete(
            get_url(f"tasks/{self.BAD_ID}"), headers=headers.manager
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
