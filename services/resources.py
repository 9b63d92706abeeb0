from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from services.api_client import API_PREFIX


@dataclass(frozen=True)
class FilterField:
	name: str
	label: str
	placeholder: str = ""
	# "text" or "select"
	kind: str = "text"
	options: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ListResource:
	"""Everything a list page needs to know about one paginated endpoint."""

	key: str
	title: str
	path: str
	filters: tuple[FilterField, ...] = ()
	row_key: str = "id"
	page_size_param: str = "per_page"
	empty_text: str = "No records found. Try adjusting your filters."

	@property
	def filter_names(self) -> tuple[str, ...]:
		return tuple(f.name for f in self.filters)

	def with_path(self, path: str) -> "ListResource":
		return replace(self, path=path)

	def row_id(self, item: dict[str, Any]) -> Any:
		return item.get(self.row_key)


LOANS = ListResource(
	key="loans",
	title="Loans Dashboard",
	path=f"{API_PREFIX}/loans",
	filters=(
		FilterField("phone_number_search", "Phone Number", "Enter phone number"),
		FilterField("name_search", "Name", "Enter name"),
		FilterField("loan_code_search", "Loan Code", "Enter loan code"),
		FilterField("status_search", "Status", "Enter status"),
	),
	empty_text="No loans found. Try adjusting your filters.",
)

LOAN_USERS = ListResource(
	key="loan_users",
	title="Loan Users Dashboard",
	path=f"{API_PREFIX}/loan-users",
	filters=(
		FilterField("user_id_search", "User ID", "Enter user ID"),
		FilterField("loan_cap_search", "Loan Cap", "Enter loan cap"),
		FilterField(
			"is_approved_search",
			"Is Approved",
			kind="select",
			options={"": "All", "1": "Yes", "0": "No"},
		),
	),
	empty_text="No loan users found. Try adjusting your filters.",
)

PRODUCTS = ListResource(
	key="products",
	title="Products Dashboard",
	path=f"{API_PREFIX}/products",
	filters=(
		FilterField("name", "Name", "Product name"),
		FilterField("brand", "Brand", "Brand"),
		FilterField("supplier_name", "Supplier", "Supplier name"),
		FilterField("id", "Product ID", "Product ID"),
		FilterField("price[gte]", "Min Price", "Min price"),
		FilterField("price[lte]", "Max Price", "Max price"),
		FilterField(
			"trashed",
			"Trashed",
			kind="select",
			options={"": "Exclude trashed", "with_trashed": "Include trashed", "only_trashed": "Only trashed"},
		),
	),
	page_size_param="paginate",
	empty_text="No products found. Try adjusting your filters.",
)

USERS = ListResource(
	key="users",
	title="Users Dashboard",
	path=f"{API_PREFIX}/users/index-users-for-loan",
	filters=(
		FilterField("phone_number", "Phone Number", "Enter phone number"),
	),
	empty_text="No users found. Try adjusting your filters.",
)


def category_products_path(category_id: int) -> str:
	return f"{API_PREFIX}/categories/{category_id}/products"


def build_list_params(resource: ListResource, page: int, page_size: int, filters: dict[str, Any]) -> dict[str, Any]:
	"""Query parameters for one list request. Unknown filter names are ignored."""
	params: dict[str, Any] = {"page": page, resource.page_size_param: page_size}
	for name in resource.filter_names:
		value = filters.get(name)
		if value is None or str(value).strip() == "":
			continue
		if name == "trashed":
			# the API takes two boolean flags instead of one tri-state value
			params[str(value)] = 1
			continue
		params[name] = str(value).strip()
	return params
