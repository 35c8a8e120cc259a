from __future__ import annotations

from fastapi.testclient import TestClient

ALICE_TOKEN = "token-alice"
BOB_TOKEN = "token-bob"
STUB_AUTH_TOKENS = f"{ALICE_TOKEN}:user-alice,{BOB_TOKEN}:user-bob"

PROCUREMENT_CSV = (
    "Product,Quantity,Supplier\n"
    "Recycled A4 Paper,10,\"Green Paper Co, Ltd\"\n"
    "Disposable Plastic Cups,500,CupWorld\n"
    "LED Light Bulbs,20,BrightHome\n"
)


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def upload_csv(
    *,
    client: TestClient,
    token: str | None = ALICE_TOKEN,
    content: str = PROCUREMENT_CSV,
    filename: str = "purchases.csv",
):
    headers = auth_headers(token) if token is not None else {}
    return client.post(
        "/api/upload",
        headers=headers,
        files={"file": (filename, content.encode("utf-8"), "text/csv")},
    )
