#!/usr/bin/env python3
"""
university_inventory_system.py
"""

from __future__ import annotations
import datetime
import enum
import logging
import math
from typing import Dict, Iterator, List, Optional, Tuple

import pandas as pd

# Configuration
MAX_ASSIGNED_ITEMS = 5
MAX_INVENTORY_ITEMS = 100
MAX_STAFF_MEMBERS = 50
DATE_FORMAT = "%Y-%m-%d"

EQUIPMENT_FEE_RATE = 0.10
FURNITURE_FEE_RATE = 0.05
FURNITURE_UPHOLSTERY_CHARGE = 15.0
UPHOLSTERY_MATERIALS = ("fabric", "leather", "upholstered")
LAB_FEE_RATE = 0.15
LAB_CALIBRATION_CHARGE = 50.0
LAB_HAZARD_CHARGE = 25.0
HAZARDOUS_LAB_TYPES = ("chemistry", "biology")

# Logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger("UniversityInventory")


# ---------------- Errors ----------------
class InventoryError(Exception):
    """Base class for recoverable inventory failures."""


class CapacityExceededError(InventoryError):
    pass


class DuplicateIdentifierError(InventoryError):
    pass


class AssignmentLimitExceededError(InventoryError):
    pass


class ItemUnavailableError(InventoryError):
    pass


class NotFoundError(InventoryError):
    pass


# ---------------- Items ----------------
class ItemKind(enum.Enum):
    EQUIPMENT = "Equipment"
    FURNITURE = "Furniture"
    LAB_EQUIPMENT = "Lab Equipment"

    @property
    def detail_label(self) -> str:
        """Name of the kind-specific attribute (brand, material, lab type)."""
        return {
            ItemKind.EQUIPMENT: "Brand",
            ItemKind.FURNITURE: "Material",
            ItemKind.LAB_EQUIPMENT: "Lab Type",
        }[self]


class InventoryItem:
    """
    A single piece of university inventory.

    Identity and purchase fields are fixed at construction; only the availability
    flag changes afterwards, toggled by StaffMember.assign_item / return_item.
    The kind-specific attribute (brand, material or lab type) is kept in `detail`
    and only feeds the maintenance fee formula.
    """

    def __init__(self,
                 item_id: str,
                 name: str,
                 kind: ItemKind,
                 detail: str,
                 purchase_date: datetime.date,
                 price: float,
                 warranty_end_date: datetime.date):
        """
        Initialize an inventory item.

        Args:
            item_id: unique identifier within the item registry.
            name: display name.
            kind: one of the ItemKind values.
            detail: brand (Equipment), material (Furniture) or lab type (Lab Equipment).
            purchase_date: date the item was purchased.
            price: purchase price, finite and not negative.
            warranty_end_date: date the warranty expires.
        """
        if not isinstance(kind, ItemKind):
            raise ValueError(f"Unknown item kind: {kind!r}")
        price = float(price)
        if not math.isfinite(price) or price < 0:
            raise ValueError(f"Price must be a finite, non-negative number: {price}")
        self._item_id = item_id
        self._name = name
        self._kind = kind
        self._detail = detail
        self._purchase_date = purchase_date
        self._price = price
        self._warranty_end_date = warranty_end_date
        self._available = True

    @property
    def item_id(self) -> str:
        return self._item_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> ItemKind:
        return self._kind

    @property
    def detail(self) -> str:
        return self._detail

    @property
    def detail_label(self) -> str:
        return self._kind.detail_label

    @property
    def purchase_date(self) -> datetime.date:
        return self._purchase_date

    @property
    def price(self) -> float:
        return self._price

    @property
    def warranty_end_date(self) -> datetime.date:
        return self._warranty_end_date

    @property
    def brand(self) -> Optional[str]:
        return self._detail if self._kind is ItemKind.EQUIPMENT else None

    @property
    def material(self) -> Optional[str]:
        return self._detail if self._kind is ItemKind.FURNITURE else None

    @property
    def lab_type(self) -> Optional[str]:
        return self._detail if self._kind is ItemKind.LAB_EQUIPMENT else None

    def is_available(self) -> bool:
        return self._available

    def set_available(self, available: bool) -> None:
        self._available = bool(available)

    def get_maintenance_fee(self) -> float:
        return compute_maintenance_fee(self)

    def __repr__(self) -> str:
        return f"InventoryItem({self._item_id!r}, {self._kind.value!r}, available={self._available})"

    def __str__(self) -> str:
        return (f"ID: {self._item_id}, Name: {self._name}, Type: {self._kind.value}, "
                f"{self.detail_label}: {self._detail}, Price: {self._price:.2f}, "
                f"Purchased: {self._purchase_date.isoformat()}, "
                f"Warranty End: {self._warranty_end_date.isoformat()}, "
                f"Available: {'Yes' if self._available else 'No'}")


def compute_maintenance_fee(item: InventoryItem) -> float:
    """
    Compute the yearly maintenance fee for an item, dispatched on its kind.

    Equipment pays a flat percentage of price. Furniture pays a smaller percentage
    plus an upholstery charge for soft materials. Lab equipment pays the largest
    percentage plus a calibration charge, and a hazard charge for chemistry and
    biology labs.

    Returns the fee rounded to cents.
    """
    kind = item.kind
    detail = (item.detail or "").strip().lower()
    if kind is ItemKind.EQUIPMENT:
        fee = item.price * EQUIPMENT_FEE_RATE
    elif kind is ItemKind.FURNITURE:
        fee = item.price * FURNITURE_FEE_RATE
        if detail in UPHOLSTERY_MATERIALS:
            fee += FURNITURE_UPHOLSTERY_CHARGE
    elif kind is ItemKind.LAB_EQUIPMENT:
        fee = item.price * LAB_FEE_RATE + LAB_CALIBRATION_CHARGE
        if detail in HAZARDOUS_LAB_TYPES:
            fee += LAB_HAZARD_CHARGE
    else:
        raise ValueError(f"No fee formula for item kind: {kind!r}")
    return round(fee, 2)


# ---------------- Registries ----------------
def id_key(identifier: str) -> str:
    """Lookup key for an identifier: case-insensitive, otherwise exact."""
    return (identifier or "").casefold()


class _Registry:
    """
    Insertion-ordered, capacity-bounded store of entities keyed by identifier.

    Identifiers are compared case-insensitively. A capacity of None means unbounded.
    """

    entity_label = "entity"

    def __init__(self, capacity: Optional[int]):
        self.capacity = capacity
        self._entries: Dict[str, object] = {}

    def _identifier_of(self, entity) -> str:
        raise NotImplementedError

    def is_full(self) -> bool:
        return self.capacity is not None and len(self._entries) >= self.capacity

    def add(self, entity) -> None:
        """
        Insert an entity at the end of the registry.

        Raises CapacityExceededError when the registry is full and
        DuplicateIdentifierError when the identifier is already taken.
        Nothing is stored on failure.
        """
        identifier = self._identifier_of(entity)
        if self.is_full():
            raise CapacityExceededError(
                f"{self.entity_label.capitalize()} registry is full ({self.capacity}).")
        key = id_key(identifier)
        if key in self._entries:
            raise DuplicateIdentifierError(f"A {self.entity_label} with ID {identifier} already exists.")
        self._entries[key] = entity

    def find_by_id(self, identifier: str):
        return self._entries.get(id_key(identifier))

    def get(self, identifier: str):
        entity = self.find_by_id(identifier)
        if entity is None:
            raise NotFoundError(f"{self.entity_label.capitalize()} not found: {identifier}")
        return entity

    def __contains__(self, identifier: str) -> bool:
        return id_key(identifier) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator:
        return iter(list(self._entries.values()))


class ItemRegistry(_Registry):
    entity_label = "item"

    def __init__(self, capacity: Optional[int] = MAX_INVENTORY_ITEMS):
        super().__init__(capacity)

    def _identifier_of(self, entity: InventoryItem) -> str:
        return entity.item_id


# ---------------- Staff ----------------
class StaffMember:
    """
    A staff member who can hold up to `max_items` inventory items at once.

    The assigned list holds the same InventoryItem objects as the item registry,
    so availability changes made here are visible everywhere.
    """

    def __init__(self, staff_id: str, full_name: str, max_items: int = MAX_ASSIGNED_ITEMS):
        self.staff_id = staff_id
        self.full_name = full_name
        self.max_items = int(max_items)
        self._assigned: List[InventoryItem] = []

    @property
    def assigned_count(self) -> int:
        return len(self._assigned)

    def can_take_more(self) -> bool:
        return len(self._assigned) < self.max_items

    def has_item(self, item_id: str) -> bool:
        key = id_key(item_id)
        return any(id_key(it.item_id) == key for it in self._assigned)

    def assign_item(self, item: InventoryItem) -> None:
        """
        Assign an available item to this staff member.

        Raises AssignmentLimitExceededError when the member already holds the
        maximum, ItemUnavailableError when the item is held elsewhere. Both are
        checked before anything changes.
        """
        if not self.can_take_more():
            raise AssignmentLimitExceededError(
                f"Staff {self.staff_id} has reached the maximum of {self.max_items} items.")
        if not item.is_available():
            raise ItemUnavailableError(f"Item {item.item_id} is currently unavailable.")
        self._assigned.append(item)
        item.set_available(False)

    def return_item(self, item: InventoryItem) -> bool:
        """
        Return an item held by this staff member back to inventory.

        Returns True if the item was held and is now available again, False when
        this member does not hold it (nothing changes in that case).
        """
        key = id_key(item.item_id)
        for idx, held in enumerate(self._assigned):
            if id_key(held.item_id) == key:
                del self._assigned[idx]
                held.set_available(True)
                return True
        return False

    def get_assigned_items(self) -> List[InventoryItem]:
        return list(self._assigned)

    def __repr__(self) -> str:
        return f"StaffMember({self.staff_id!r}, assigned={len(self._assigned)})"

    def __str__(self) -> str:
        lines = [f"Staff ID: {self.staff_id}, Name: {self.full_name}, "
                 f"Total Assigned Items: {len(self._assigned)}"]
        for it in self._assigned:
            lines.append(f"  -> {it}")
        return "\n".join(lines)


class StaffRegistry(_Registry):
    entity_label = "staff member"

    def __init__(self, capacity: Optional[int] = MAX_STAFF_MEMBERS):
        super().__init__(capacity)

    def _identifier_of(self, entity: StaffMember) -> str:
        return entity.staff_id


# ---------------- Facade ----------------
class InventorySystem:
    """
    InventorySystem wires the item and staff registries together for the console.

    It resolves identifiers through the registries, calls the assignment protocol
    on the resolved staff member and turns failures into (success, message) pairs.
    Search and report helpers return plain lists or pandas DataFrames.
    """

    def __init__(self,
                 max_items: Optional[int] = MAX_INVENTORY_ITEMS,
                 max_staff: Optional[int] = MAX_STAFF_MEMBERS,
                 max_assigned: int = MAX_ASSIGNED_ITEMS):
        """
        Initialize an empty inventory.

        Args:
            max_items: item registry capacity (None for unbounded).
            max_staff: staff registry capacity (None for unbounded).
            max_assigned: maximum number of items one staff member may hold.
        """
        self.items = ItemRegistry(max_items)
        self.staff = StaffRegistry(max_staff)
        self.max_assigned = int(max_assigned)

    # ---------------- Core operations ----------------
    def add_item(self, kind: ItemKind, item_id: str, name: str, purchase_date: datetime.date,
                 price: float, warranty_end_date: datetime.date, detail: str) -> Tuple[bool, str]:
        """
        Create an item and add it to the inventory.

        Returns (success, message).
        """
        try:
            item = InventoryItem(item_id, name, kind, detail, purchase_date, price, warranty_end_date)
            self.items.add(item)
        except (InventoryError, ValueError) as e:
            logger.debug("Rejected item %s: %s", item_id, e)
            return False, str(e)
        logger.info("Added %s %s", kind.value, item_id)
        return True, f"Item {item_id} successfully added."

    def register_staff(self, staff_id: str, full_name: str) -> Tuple[bool, str]:
        """
        Register a new staff member.

        Returns (success, message); fails when the ID exists or the registry is full.
        """
        try:
            self.staff.add(StaffMember(staff_id, full_name, self.max_assigned))
        except InventoryError as e:
            logger.debug("Rejected staff %s: %s", staff_id, e)
            return False, str(e)
        logger.info("Registered staff %s", staff_id)
        return True, f"Staff member {staff_id} registered successfully."

    def assign_item(self, staff_id: str, item_id: str) -> Tuple[bool, str]:
        """
        Assign an inventory item to a staff member.

        Returns (success, message).
        """
        try:
            member = self.staff.get(staff_id)
            item = self.items.get(item_id)
            member.assign_item(item)
        except InventoryError as e:
            logger.warning("Assign %s -> %s failed: %s", item_id, staff_id, e)
            return False, f"Failed to assign: {e}"
        logger.info("Assigned %s to %s", item.item_id, member.staff_id)
        return True, f"Item '{item.name}' ({item.item_id}) assigned to {member.full_name}."

    def return_item(self, staff_id: str, item_id: str) -> Tuple[bool, str]:
        """
        Take an item back from a staff member.

        Fails when either ID is unknown or the staff member does not hold the item.
        Returns (success, message).
        """
        try:
            member = self.staff.get(staff_id)
            item = self.items.get(item_id)
        except InventoryError as e:
            return False, str(e)
        if not member.return_item(item):
            return False, f"Staff member {member.staff_id} does not have item {item.item_id}."
        logger.info("Item %s returned by %s", item.item_id, member.staff_id)
        return True, f"Item '{item.name}' ({item.item_id}) returned by {member.full_name}."

    # ---------------- Lookups ----------------
    def get_item(self, item_id: str) -> Optional[InventoryItem]:
        return self.items.find_by_id(item_id)

    def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        return self.staff.find_by_id(staff_id)

    def holder_of(self, item_id: str) -> Optional[StaffMember]:
        for member in self.staff:
            if member.has_item(item_id):
                return member
        return None

    # ---------------- Search ----------------
    def search_items(self, query: str) -> List[InventoryItem]:
        """
        Search items by ID or name using a case-insensitive substring match.

        Returns matching items in inventory order; an empty query matches nothing.
        """
        q = (query or "").strip()
        if q == "" or len(self.items) == 0:
            return []
        df = self._items_df()
        mask_id = df["Item ID"].astype(str).str.contains(q, case=False, na=False, regex=False)
        mask_name = df["Name"].astype(str).str.contains(q, case=False, na=False, regex=False)
        return [self.items.get(i) for i in df.loc[mask_id | mask_name, "Item ID"]]

    def items_by_kind(self, kind: ItemKind) -> List[InventoryItem]:
        return [it for it in self.items if it.kind is kind]

    def available_items(self) -> List[InventoryItem]:
        return [it for it in self.items if it.is_available()]

    def items_with_expired_warranty(self, as_of: Optional[datetime.date] = None) -> List[InventoryItem]:
        """Items whose warranty ended before `as_of` (today by default)."""
        as_of = as_of or datetime.date.today()
        return [it for it in self.items if it.warranty_end_date < as_of]

    # ---------------- Reports ----------------
    def _items_df(self) -> pd.DataFrame:
        cols = ["Item ID", "Name", "Type", "Detail", "Price", "Purchase Date",
                "Warranty End", "Maintenance Fee", "available"]
        rows = [{
            "Item ID": it.item_id,
            "Name": it.name,
            "Type": it.kind.value,
            "Detail": it.detail,
            "Price": it.price,
            "Purchase Date": it.purchase_date,
            "Warranty End": it.warranty_end_date,
            "Maintenance Fee": it.get_maintenance_fee(),
            "available": it.is_available(),
        } for it in self.items]
        return pd.DataFrame(rows, columns=cols)

    def total_maintenance_fees(self) -> float:
        return round(sum(it.get_maintenance_fee() for it in self.items), 2)

    def export_report_items(self) -> pd.DataFrame:
        """
        Produce a DataFrame suitable for reporting the inventory.

        Adds a human-friendly Availability column and the ID of the current holder.
        """
        out = self._items_df()
        out["Availability"] = out["available"].map({True: "Available", False: "Assigned"})
        holders = {}
        for member in self.staff:
            for it in member.get_assigned_items():
                holders[it.item_id] = member.staff_id
        out["Assigned To"] = out["Item ID"].map(holders).fillna("")
        return out.drop(columns="available")

    def export_report_staff(self) -> pd.DataFrame:
        """
        Build a DataFrame summarizing staff members and their current assignments.

        Returns columns: Staff ID, Name, AssignedCount, AssignedItems (comma separated).
        """
        rows = []
        for member in self.staff:
            assigned = member.get_assigned_items()
            rows.append({
                "Staff ID": member.staff_id,
                "Name": member.full_name,
                "AssignedCount": len(assigned),
                "AssignedItems": ",".join(it.item_id for it in assigned),
            })
        return pd.DataFrame(rows, columns=["Staff ID", "Name", "AssignedCount", "AssignedItems"])


# ---------------- CLI ----------------
def input_prompt(prompt: str) -> str:
    """
    Wrapper around built-in input() that returns a stripped string and handles interrupts.

    Returns an empty string on EOF/KeyboardInterrupt.
    """
    try:
        return input(prompt).strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return ""


def read_non_empty(prompt: str) -> str:
    while True:
        value = input_prompt(prompt)
        if value:
            return value
        print("This field cannot be empty.")


def read_int(prompt: str) -> int:
    while True:
        raw = input_prompt(prompt)
        try:
            return int(raw)
        except ValueError:
            print("Invalid number. Please enter a valid integer.")


def read_float(prompt: str, allow_negative: bool = False) -> float:
    while True:
        raw = input_prompt(prompt)
        try:
            value = float(raw)
        except ValueError:
            print("Invalid input. Please enter a valid number.")
            continue
        if not math.isfinite(value):
            print("Invalid input. Please enter a finite number.")
            continue
        if value < 0 and not allow_negative:
            print("Value cannot be negative.")
            continue
        return value


def read_date(prompt: str) -> datetime.date:
    while True:
        raw = input_prompt(f"{prompt} (YYYY-MM-DD): ")
        try:
            return datetime.datetime.strptime(raw, DATE_FORMAT).date()
        except ValueError:
            print("Invalid date format. Please follow YYYY-MM-DD.")


def read_item_kind() -> Optional[ItemKind]:
    """Ask for an item type; returns None on an invalid selection."""
    kinds = list(ItemKind)
    print("\nSelect the type of item to add:")
    for n, kind in enumerate(kinds, start=1):
        print(f"{n}. {kind.value}")
    choice = read_int("Choice: ")
    if 1 <= choice <= len(kinds):
        return kinds[choice - 1]
    return None


def print_menu():
    """
    Print the interactive CLI menu to stdout.
    """
    print("\n===== University Inventory (CLI) =====")
    print("1. Add inventory item")
    print("2. Register staff member")
    print("3. Assign item to staff")
    print("4. Return item from staff")
    print("5. Search inventory")
    print("6. Generate reports")
    print("7. Export report charts & aggregates")
    print("0. Exit")


def _add_item_interactive(system: InventorySystem) -> None:
    if system.items.is_full():
        print("Inventory is full. Cannot add more items.")
        return
    kind = read_item_kind()
    if kind is None:
        print("Invalid selection. Returning to menu.")
        return
    item_id = read_non_empty("Item ID: ")
    if system.get_item(item_id) is not None:
        print("An item with this ID already exists.")
        return
    name = read_non_empty("Item name: ")
    purchase_date = read_date("Purchase date")
    price = read_float("Purchase price: ")
    warranty_end = read_date("Warranty end date")
    detail = read_non_empty(f"{kind.detail_label}: ")
    ok, msg = system.add_item(kind, item_id, name, purchase_date, price, warranty_end, detail)
    print(msg)


def _search_interactive(system: InventorySystem) -> None:
    print("\n1. By ID or name")
    print("2. By item type")
    print("3. Available items only")
    choice = input_prompt("Choose (1-3): ")
    if choice == "1":
        res = system.search_items(input_prompt("Search query: "))
    elif choice == "2":
        kind = read_item_kind()
        res = system.items_by_kind(kind) if kind else []
    elif choice == "3":
        res = system.available_items()
    else:
        print("Unknown choice.")
        return
    print(f"Found {len(res)} item(s):")
    for it in res:
        print(it)


def _reports_interactive(system: InventorySystem) -> None:
    items_df = system.export_report_items()
    staff_df = system.export_report_staff()
    print(f"\nInventory ({len(items_df)} item(s)):")
    if not items_df.empty:
        print(items_df[["Item ID", "Name", "Type", "Price", "Maintenance Fee",
                        "Availability", "Assigned To"]].to_string(index=False))
    print(f"\nStaff ({len(staff_df)}):")
    if not staff_df.empty:
        print(staff_df.to_string(index=False))
    print(f"\nTotal yearly maintenance fees: {system.total_maintenance_fees():.2f}")
    expired = system.items_with_expired_warranty()
    print(f"Items with expired warranty: {len(expired)}")
    for it in expired:
        print(f"  {it.item_id}: {it.name} (ended {it.warranty_end_date.isoformat()})")


def cli_loop(system: InventorySystem):
    """
    Interactive command-loop for the inventory system.

    Presents a text menu, accepts user input and invokes `InventorySystem` methods.
    """
    while True:
        print_menu()
        choice = input_prompt("Choose (0-7): ")
        if choice == "0":
            break
        elif choice == "1":
            _add_item_interactive(system)
        elif choice == "2":
            if system.staff.is_full():
                print("Staff limit reached. Cannot register more.")
                continue
            staff_id = read_non_empty("Staff ID: ")
            if system.get_staff(staff_id) is not None:
                print("A staff member with this ID already exists.")
                continue
            name = read_non_empty("Full name: ")
            ok, msg = system.register_staff(staff_id, name)
            print(msg)
        elif choice == "3":
            if len(system.staff) == 0:
                print("No staff registered. Please register staff first.")
                continue
            if len(system.items) == 0:
                print("No items in inventory. Add items first.")
                continue
            ok, msg = system.assign_item(read_non_empty("Staff ID: "), read_non_empty("Item ID to assign: "))
            print(msg)
        elif choice == "4":
            if len(system.staff) == 0:
                print("No staff registered.")
                continue
            ok, msg = system.return_item(read_non_empty("Staff ID: "), read_non_empty("Item ID to return: "))
            print(msg)
        elif choice == "5":
            _search_interactive(system)
        elif choice == "6":
            _reports_interactive(system)
        elif choice == "7":
            # imported lazily so the console works without the plotting stack loaded
            from inventory_report_analysis import analyze
            out = input_prompt("Output folder (default inventory_outputs): ") or "inventory_outputs"
            analyze(system, out)
        else:
            print("Unknown choice. Try again.")


def demo_run():
    """
    Start an interactive session on an empty in-memory inventory.
    """
    system = InventorySystem()
    print("Welcome to the University Inventory System!")
    cli_loop(system)
    print("Goodbye.")


if __name__ == "__main__":
    demo_run()
