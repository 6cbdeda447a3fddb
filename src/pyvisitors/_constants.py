"""Internal constants shared across the library."""

USER_AGENT = "pyvisitors/1"

#: Presence value reported when a visitor disconnects.
OFFLINE = "offline"

#: Wire field carrying the visitor's current page.
LOCATION_FIELD = "currentPage"

#: Wire field carrying the flag state in flag events and bootstrap batches.
FLAG_FIELD = "flag"

# ------------------------------------------------------------------
# Inbound event names
# ------------------------------------------------------------------

EVENT_INITIAL_DATA = "initialData"
EVENT_PAYMENT = "newPayment"
EVENT_LOCATION = "locationUpdated"
EVENT_DELETED = "userDeleted"
EVENT_FLAG = "flagUpdated"

#: Raised locally by the transport when the channel comes back after a drop.
EVENT_RECONNECTED = "reconnect"

#: Profile-style event name -> category label used in logs and notifications.
PROFILE_EVENTS: dict[str, str] = {
    "newIndex": "index",
    "newDetails": "details",
    "newShamel": "shamel",
    "newThirdparty": "thirdparty",
    "newBilling": "billing",
    "newPhone": "phone",
    "newPin": "pin",
    "newOtp": "otp",
    "newPhoneCode": "phone_code",
    "newNafad": "nafad",
}

PRESENCE_CATEGORY = "presence"
PAYMENT_CATEGORY = "payment"

# ------------------------------------------------------------------
# Bootstrap batch names with dedicated handling
# ------------------------------------------------------------------

BATCH_PAYMENT = "payment"
BATCH_FLAGS = "flags"
BATCH_LOCATIONS = "locations"
SPECIAL_BATCHES: frozenset[str] = frozenset({BATCH_PAYMENT, BATCH_FLAGS, BATCH_LOCATIONS})

# ------------------------------------------------------------------
# Outbound commands
# ------------------------------------------------------------------

COMMAND_LOAD_DATA = "loadData"
COMMAND_TOGGLE_FLAG = "toggleFlag"

DELETE_ENDPOINT = "/api/users/{key}"
