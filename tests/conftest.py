import pytest

from listingview.schemas import User

LISTING_ID = "5f3c2a9e-1b7d-4c8e-9a51-0d6e7f8a9b10"
OWNER_ID = "a1b2c3d4-0000-4000-8000-000000000001"
VIEWER_ID = "a1b2c3d4-0000-4000-8000-000000000002"


def listing_record(
    *,
    listing_id=LISTING_ID,
    state="published",
    listing_type="daily-rental",
    process_alias="default-booking/release-1",
    unit_type="day",
    author_id=OWNER_ID,
    title="Cozy Cabin by the Lake",
):
    public_data = {}
    if listing_type is not None:
        public_data["listingType"] = listing_type
    if process_alias is not None:
        public_data["transactionProcessAlias"] = process_alias
    if unit_type is not None:
        public_data["unitType"] = unit_type
    record = {
        "id": {"uuid": listing_id},
        "type": "listing",
        "attributes": {
            "title": title,
            "description": "Two bedrooms, sauna, rowing boat.",
            "state": state,
            "price": {"amount": 12000, "currency": "EUR"},
            "publicData": public_data,
            "metadata": {},
        },
    }
    if author_id is not None:
        record["author"] = {
            "id": {"uuid": author_id},
            "attributes": {"profile": {"displayName": "Maija H", "abbreviatedName": "MH"}},
        }
    return record


def user(user_id, *, stripe_connected=False, favorites=None):
    return User.model_validate({
        "id": {"uuid": user_id},
        "attributes": {
            "stripeConnected": stripe_connected,
            "profile": {
                "displayName": "Test User",
                "publicData": {"favorites": list(favorites or [])},
            },
        },
    })


@pytest.fixture
def owner():
    return user(OWNER_ID)


@pytest.fixture
def payout_ready_owner():
    return user(OWNER_ID, stripe_connected=True)


@pytest.fixture
def viewer():
    return user(VIEWER_ID)
