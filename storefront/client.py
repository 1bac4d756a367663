# client.py
import requests

DEFAULT_TIMEOUT = 6


class ApiError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


class AdminClient:
    """
    Thin wrapper over the storefront REST API for admin tooling.

    The session token returned by login is replayed as a Bearer header, so
    the client also works where cookies are not kept.
    """

    def __init__(self, base_url: str, session: requests.Session | None = None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.http = session or requests.Session()
        self.timeout = timeout
        self.token = None
        self.user = None

    def _headers(self, admin=False):
        h = {"Accept": "application/json"}
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        if admin:
            h["x-admin"] = "true"
        return h

    def _call(self, method, path, admin=False, **kw):
        r = self.http.request(method, f"{self.base_url}{path}", headers=self._headers(admin),
                              timeout=self.timeout, **kw)
        if r.status_code == 204:
            return None
        try:
            body = r.json()
        except ValueError:
            body = {"error": r.text}
        if not r.ok:
            raise ApiError(r.status_code, (body or {}).get("error") or r.reason)
        return body

    # ---------- Auth ----------
    def login(self, username: str, password: str) -> dict:
        body = self._call("POST", "/api/auth/login", json={"username": username, "password": password})
        self.token = body["token"]
        self.user = body["user"]
        return body

    def logout(self) -> None:
        try:
            self._call("POST", "/api/auth/logout")
        finally:
            self.token = None
            self.user = None

    def verify(self) -> dict:
        return self._call("GET", "/api/auth/verify")

    # ---------- Products ----------
    def list_products(self, admin=True, **params) -> dict:
        return self._call("GET", "/api/products", admin=admin, params=params)

    def get_product(self, product_id: str) -> dict:
        return self._call("GET", f"/api/products/{product_id}")

    def create_product(self, data: dict) -> dict:
        return self._call("POST", "/api/products", json=data)

    def update_product(self, product_id: str, data: dict) -> dict:
        return self._call("PUT", f"/api/products/{product_id}", json=data)

    def delete_product(self, product_id: str) -> None:
        self._call("DELETE", f"/api/products/{product_id}")

    # ---------- Categories ----------
    def list_categories(self, admin=True) -> list:
        return self._call("GET", "/api/categories", admin=admin)["categories"]

    def create_category(self, data: dict) -> dict:
        return self._call("POST", "/api/categories", json=data)

    def update_category(self, category_id: str, data: dict) -> dict:
        return self._call("PUT", f"/api/categories/{category_id}", json=data)

    def delete_category(self, category_id: str) -> None:
        self._call("DELETE", f"/api/categories/{category_id}")

    # ---------- Content ----------
    def list_content(self, **params) -> list:
        return self._call("GET", "/api/content", params=params)["content"]

    def create_content(self, data: dict) -> dict:
        return self._call("POST", "/api/content", json=data)

    def update_content(self, content_id: str, data: dict) -> dict:
        return self._call("PUT", f"/api/content/{content_id}", json=data)

    def delete_content(self, content_id: str) -> None:
        self._call("DELETE", f"/api/content/{content_id}")

    # ---------- Newsletter / export ----------
    def list_subscribers(self) -> dict:
        return self._call("GET", "/api/newsletter")

    def export(self) -> dict:
        return self._call("GET", "/api/export")
