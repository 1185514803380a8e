from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    CUSTOMER = "customer"
    STAFF = "staff"
    MANAGER = "manager"
    ADMIN = "admin"


class Permission(StrEnum):
    # Dashboard & analytics
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_ANALYTICS = "view_analytics"
    VIEW_ADVANCED_ANALYTICS = "view_advanced_analytics"

    # Users
    VIEW_USERS = "view_users"
    CREATE_USERS = "create_users"
    EDIT_USERS = "edit_users"
    DELETE_USERS = "delete_users"
    MANAGE_USER_ROLES = "manage_user_roles"

    # Products
    VIEW_PRODUCTS = "view_products"
    CREATE_PRODUCTS = "create_products"
    EDIT_PRODUCTS = "edit_products"
    DELETE_PRODUCTS = "delete_products"
    MANAGE_INVENTORY = "manage_inventory"

    # Categories
    VIEW_CATEGORIES = "view_categories"
    CREATE_CATEGORIES = "create_categories"
    EDIT_CATEGORIES = "edit_categories"
    DELETE_CATEGORIES = "delete_categories"

    # Orders
    VIEW_ORDERS = "view_orders"
    EDIT_ORDERS = "edit_orders"
    UPDATE_ORDER_STATUS = "update_order_status"
    CANCEL_ORDERS = "cancel_orders"
    PROCESS_REFUNDS = "process_refunds"

    # Settings
    VIEW_SETTINGS = "view_settings"
    EDIT_SETTINGS = "edit_settings"
    MANAGE_SYSTEM = "manage_system"

    # Shipping
    VIEW_SHIPPING_ZONES = "view_shipping_zones"
    MANAGE_SHIPPING_ZONES = "manage_shipping_zones"

    # Coupons
    VIEW_COUPONS = "view_coupons"
    CREATE_COUPONS = "create_coupons"
    EDIT_COUPONS = "edit_coupons"
    DELETE_COUPONS = "delete_coupons"

    # Newsletters
    VIEW_NEWSLETTERS = "view_newsletters"
    CREATE_NEWSLETTERS = "create_newsletters"
    EDIT_NEWSLETTERS = "edit_newsletters"
    DELETE_NEWSLETTERS = "delete_newsletters"

    # Website pages
    VIEW_WEBSITE_PAGES = "view_website_pages"
    CREATE_WEBSITE_PAGES = "create_website_pages"
    EDIT_WEBSITE_PAGES = "edit_website_pages"
    DELETE_WEBSITE_PAGES = "delete_website_pages"
    PUBLISH_WEBSITE_PAGES = "publish_website_pages"

    # Blog
    VIEW_BLOG = "view_blog"
    CREATE_BLOG_POSTS = "create_blog_posts"
    EDIT_BLOG_POSTS = "edit_blog_posts"
    DELETE_BLOG_POSTS = "delete_blog_posts"
    PUBLISH_BLOG_POSTS = "publish_blog_posts"
    MANAGE_BLOG_CATEGORIES = "manage_blog_categories"
    MANAGE_BLOG_TAGS = "manage_blog_tags"
    MODERATE_BLOG_COMMENTS = "moderate_blog_comments"

    # Reports & exports
    EXPORT_DATA = "export_data"
    VIEW_REPORTS = "view_reports"
    GENERATE_REPORTS = "generate_reports"


ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.CUSTOMER: frozenset(),
    Role.STAFF: frozenset(
        {
            Permission.VIEW_DASHBOARD,
            Permission.VIEW_ORDERS,
            Permission.EDIT_ORDERS,
            Permission.UPDATE_ORDER_STATUS,
            Permission.CANCEL_ORDERS,
            Permission.PROCESS_REFUNDS,
            Permission.VIEW_REPORTS,
            Permission.EXPORT_DATA,
        }
    ),
    Role.MANAGER: frozenset(
        {
            Permission.VIEW_DASHBOARD,
            Permission.VIEW_ANALYTICS,
            Permission.VIEW_PRODUCTS,
            Permission.CREATE_PRODUCTS,
            Permission.EDIT_PRODUCTS,
            Permission.DELETE_PRODUCTS,
            Permission.MANAGE_INVENTORY,
            Permission.VIEW_CATEGORIES,
            Permission.CREATE_CATEGORIES,
            Permission.EDIT_CATEGORIES,
            Permission.DELETE_CATEGORIES,
            Permission.VIEW_ORDERS,
            Permission.EDIT_ORDERS,
            Permission.UPDATE_ORDER_STATUS,
            Permission.CANCEL_ORDERS,
            Permission.PROCESS_REFUNDS,
            Permission.VIEW_COUPONS,
            Permission.CREATE_COUPONS,
            Permission.EDIT_COUPONS,
            Permission.DELETE_COUPONS,
            Permission.VIEW_NEWSLETTERS,
            Permission.CREATE_NEWSLETTERS,
            Permission.EDIT_NEWSLETTERS,
            Permission.DELETE_NEWSLETTERS,
            Permission.VIEW_WEBSITE_PAGES,
            Permission.CREATE_WEBSITE_PAGES,
            Permission.EDIT_WEBSITE_PAGES,
            Permission.PUBLISH_WEBSITE_PAGES,
            Permission.VIEW_BLOG,
            Permission.CREATE_BLOG_POSTS,
            Permission.EDIT_BLOG_POSTS,
            Permission.PUBLISH_BLOG_POSTS,
            Permission.MANAGE_BLOG_CATEGORIES,
            Permission.MANAGE_BLOG_TAGS,
            Permission.MODERATE_BLOG_COMMENTS,
            Permission.VIEW_SHIPPING_ZONES,
            Permission.MANAGE_SHIPPING_ZONES,
            Permission.VIEW_USERS,
            Permission.VIEW_REPORTS,
            Permission.EXPORT_DATA,
        }
    ),
    Role.ADMIN: frozenset(Permission),
}

ADMIN_PANEL_ROLES = frozenset({Role.ADMIN, Role.MANAGER, Role.STAFF})


def _coerce_role(role: str | None) -> Role | None:
    try:
        return Role(role)
    except ValueError:
        return None


def permissions_for_role(role: str | None) -> frozenset[Permission]:
    coerced = _coerce_role(role)
    if coerced is None:
        return frozenset()
    return ROLE_PERMISSIONS[coerced]


def has_permission(role: str | None, permission: Permission) -> bool:
    return permission in permissions_for_role(role)


def has_any_permission(role: str | None, permissions) -> bool:
    granted = permissions_for_role(role)
    return any(permission in granted for permission in permissions)


def has_all_permissions(role: str | None, permissions) -> bool:
    granted = permissions_for_role(role)
    return all(permission in granted for permission in permissions)


def role_info(role: str | None) -> dict:
    """Summary consumed by admin front-ends to decide which screens to show."""
    coerced = _coerce_role(role)
    return {
        "role": role,
        "permissions": sorted(permission.value for permission in permissions_for_role(role)),
        "can_access_admin": coerced in ADMIN_PANEL_ROLES,
        "is_admin": coerced == Role.ADMIN,
        "is_manager": coerced == Role.MANAGER,
        "is_staff": coerced == Role.STAFF,
        "is_customer": coerced == Role.CUSTOMER,
    }
