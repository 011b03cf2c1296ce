"""Profile updates and the profile image swap."""
import pytest

from app.core.constants import MAX_IMAGE_SIZE
from app.models.user import User
from app.services.profile_service import ImageUpload, ProfileService
from app.services.storage_service import StorageError
from app.utils.errors import UnauthorizedError, ValidationError

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class RecordingStorage:
    """In-memory image store that records the order of calls."""

    def __init__(self, fail_upload=False, fail_delete=False):
        self.calls = []
        self.fail_upload = fail_upload
        self.fail_delete = fail_delete
        self.uploaded = 0

    async def upload_image(self, content, filename=None, content_type=None, folder=None):
        self.calls.append(("upload", filename))
        if self.fail_upload:
            raise StorageError("Failed to upload image")
        self.uploaded += 1
        return f"https://images.example.com/pizza/profiles/{self.uploaded}.png"

    async def delete_image(self, url):
        self.calls.append(("delete", url))
        if self.fail_delete:
            raise RuntimeError("storage unavailable")


def _png(name="avatar.png", content=PNG, content_type="image/png"):
    return ImageUpload(content=content, filename=name, content_type=content_type)


def _reload(db_session, user_id):
    db_session.expire_all()
    return db_session.get(User, user_id)


@pytest.fixture
def user_id(make_user, db_session):
    user_id = make_user().user.id
    user = db_session.get(User, user_id)
    user.first_name = "Mario"
    user.last_name = "Rossi"
    user.profile_image = "https://images.example.com/pizza/profiles/old.png"
    db_session.commit()
    return user_id


async def test_update_first_name_only(db_session, user_id):
    storage = RecordingStorage()
    service = ProfileService(db_session, storage)

    result = await service.update_profile(user_id, {"first_name": "Luigi"})

    assert result.first_name == "Luigi"
    assert result.last_name == "Rossi"
    assert result.profile_image.endswith("old.png")
    assert storage.calls == []


async def test_empty_string_clears_field(db_session, user_id):
    service = ProfileService(db_session, RecordingStorage())

    result = await service.update_profile(user_id, {"last_name": ""})

    assert result.last_name is None
    assert _reload(db_session, user_id).last_name is None
    assert _reload(db_session, user_id).first_name == "Mario"


async def test_no_changes_returns_current_user(db_session, user_id):
    before = _reload(db_session, user_id).updated_at
    service = ProfileService(db_session, RecordingStorage())

    result = await service.update_profile(user_id, {})

    assert result.first_name == "Mario"
    assert _reload(db_session, user_id).updated_at == before


async def test_new_image_uploaded_before_old_is_deleted(db_session, user_id):
    storage = RecordingStorage()
    service = ProfileService(db_session, storage)

    result = await service.update_profile(user_id, {}, _png())

    assert [call[0] for call in storage.calls] == ["upload", "delete"]
    assert storage.calls[1][1].endswith("old.png")
    assert result.profile_image == "https://images.example.com/pizza/profiles/1.png"
    assert _reload(db_session, user_id).profile_image == result.profile_image


async def test_failed_upload_keeps_old_image(db_session, user_id):
    storage = RecordingStorage(fail_upload=True)
    service = ProfileService(db_session, storage)

    with pytest.raises(ValidationError) as excinfo:
        await service.update_profile(user_id, {"first_name": "Luigi"}, _png())

    assert excinfo.value.status_code == 400
    assert storage.calls == [("upload", "avatar.png")]
    user = _reload(db_session, user_id)
    assert user.profile_image.endswith("old.png")
    assert user.first_name == "Mario"


async def test_failed_delete_of_old_image_is_ignored(db_session, user_id):
    storage = RecordingStorage(fail_delete=True)
    service = ProfileService(db_session, storage)

    result = await service.update_profile(user_id, {"first_name": "Luigi"}, _png())

    assert result.first_name == "Luigi"
    assert result.profile_image.endswith("/1.png")


@pytest.mark.parametrize(
    "image,message",
    [
        (_png(content=b""), "Uploaded file is empty"),
        (_png(name="notes.txt", content_type="text/plain"), "Unsupported file type"),
        (_png(content=b"\x00" * (MAX_IMAGE_SIZE + 1)), "File size cannot exceed 5MB"),
    ],
)
async def test_invalid_image_never_reaches_storage(db_session, user_id, image, message):
    storage = RecordingStorage()
    service = ProfileService(db_session, storage)

    with pytest.raises(ValidationError) as excinfo:
        await service.update_profile(user_id, {}, image)

    assert message in excinfo.value.detail
    assert storage.calls == []


async def test_update_for_missing_user(db_session):
    service = ProfileService(db_session, RecordingStorage())

    with pytest.raises(UnauthorizedError):
        await service.update_profile("00000000-0000-0000-0000-000000000000", {"first_name": "X"})


async def test_local_storage_round_trip(storage, settings):
    url = await storage.upload_image(PNG, filename="avatar.png", content_type="image/png")

    assert url.startswith("/static/pizza/profiles/")
    assert url.endswith(".png")
    stored = settings.UPLOAD_DIR + url[len("/static"):]
    with open(stored, "rb") as f:
        assert f.read() == PNG

    await storage.delete_image(url)
    await storage.delete_image(url)
    await storage.delete_image("https://elsewhere.example.com/x.png")


async def test_stored_extension_follows_content_type(storage):
    url = await storage.upload_image(b"<script>alert(1)</script>", filename="x.html", content_type="image/png")

    assert url.endswith(".png")


async def test_patch_profile_over_http(async_client):
    r = await async_client.post("/auth/register", json={"email": "chef@example.com", "password": "Secur3!Pass"})
    headers = {"Authorization": f"Bearer {r.json()['accessToken']}"}

    r = await async_client.patch(
        "/auth/profile",
        headers=headers,
        data={"firstName": "Chef", "lastName": "Boyardee"},
        files={"profileImage": ("avatar.png", PNG, "image/png")},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["firstName"] == "Chef"
    assert body["lastName"] == "Boyardee"
    assert body["profileImage"].startswith("/static/pizza/profiles/")

    # Locally stored images are served without a bearer token
    r = await async_client.get(body["profileImage"])
    assert r.status_code == 200
    assert r.content == PNG

    r = await async_client.get("/auth/me", headers=headers)
    assert r.json()["profileImage"] == body["profileImage"]


async def test_patch_profile_rejects_bad_upload(async_client):
    r = await async_client.post("/auth/register", json={"email": "chef@example.com", "password": "Secur3!Pass"})
    headers = {"Authorization": f"Bearer {r.json()['accessToken']}"}

    r = await async_client.patch(
        "/auth/profile",
        headers=headers,
        files={"profileImage": ("notes.txt", b"hello", "text/plain")},
    )
    assert r.status_code == 400
    assert r.json()["statusCode"] == 400

    r = await async_client.patch(
        "/auth/profile",
        headers=headers,
        data={"firstName": "x" * 101},
        files={"profileImage": ("avatar.png", PNG, "image/png")},
    )
    assert r.status_code == 400
    assert isinstance(r.json()["message"], list)

    r = await async_client.get("/auth/me", headers=headers)
    assert r.json()["firstName"] is None
    assert r.json()["profileImage"] is None


async def test_patch_profile_requires_auth(async_client):
    r = await async_client.patch("/auth/profile", data={"firstName": "Anon"})
    assert r.status_code == 401


async def test_uploaded_html_is_not_served_as_html(async_client):
    r = await async_client.post("/auth/register", json={"email": "chef@example.com", "password": "Secur3!Pass"})
    headers = {"Authorization": f"Bearer {r.json()['accessToken']}"}

    r = await async_client.patch(
        "/auth/profile",
        headers=headers,
        files={"profileImage": ("evil.html", b"<script>alert(1)</script>", "image/png")},
    )
    assert r.status_code == 200
    image_url = r.json()["profileImage"]
    assert image_url.endswith(".png")

    r = await async_client.get(image_url)
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"


async def test_patch_profile_rejects_oversized_upload(async_client):
    r = await async_client.post("/auth/register", json={"email": "chef@example.com", "password": "Secur3!Pass"})
    headers = {"Authorization": f"Bearer {r.json()['accessToken']}"}

    r = await async_client.patch(
        "/auth/profile",
        headers=headers,
        files={"profileImage": ("big.png", b"\x00" * (MAX_IMAGE_SIZE + 1), "image/png")},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "File size cannot exceed 5MB"
