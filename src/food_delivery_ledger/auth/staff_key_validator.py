"""API key validation for vendor and delivery partner endpoints.

Each configured entry is either ``<staff_id>=<key>`` or a bare key. A bare key
is named after its role and position in the list, so ``courier-2`` is the
second courier key. Keys are matched exactly; a key configured for both roles
resolves to the vendor role.
"""

from food_delivery_ledger.models.identity_models import StaffIdentity, StaffRole


def parse_staff_entry(entry: str, role: StaffRole, position: int) -> tuple[str, StaffIdentity]:
    """Split a configured entry into its key and the identity it grants.

    Args:
        entry: ``<staff_id>=<key>`` or a bare key
        role: Role granted by the list the entry came from
        position: 1-based position in that list

    Returns:
        tuple: The API key and its StaffIdentity
    """
    staff_id, separator, key = entry.partition("=")
    if not separator or not staff_id.strip() or not key.strip():
        return entry, StaffIdentity(staff_id=f"{role.value}-{position}", role=role)
    return key.strip(), StaffIdentity(staff_id=staff_id.strip(), role=role)


class StaffKeyValidator:
    """Maps staff API keys to the identity they grant.

    With no keys configured every lookup fails, so all staff endpoints answer
    401.
    """

    def __init__(self, vendor_keys: list[str], courier_keys: list[str]) -> None:
        """Initialize validator with the keys for each role.

        Args:
            vendor_keys: Entries granting the vendor role
            courier_keys: Entries granting the courier role
        """
        self.identities: dict[str, StaffIdentity] = {}
        for role, entries in ((StaffRole.COURIER, courier_keys), (StaffRole.VENDOR, vendor_keys)):
            for position, entry in enumerate(entries, start=1):
                key, identity = parse_staff_entry(entry, role, position)
                self.identities[key] = identity

    def identity_for(self, api_key: str) -> StaffIdentity | None:
        """Look up the staff member an API key belongs to.

        Args:
            api_key: The API key to check

        Returns:
            The identity, or None if the key is not recognised
        """
        return self.identities.get(api_key)
