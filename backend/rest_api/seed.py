"""
Seed data for development and testing.
Creates a demo tenant with one restaurant, its staff, floor and menu, plus
a platform super-admin. Enabled with SEED_DEMO_DATA=true.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import (
    Category,
    Hall,
    Product,
    Restaurant,
    RestaurantTable,
    RestaurantUser,
    SuperAdmin,
    Tenant,
    User,
)
from shared.config.constants import DEFAULT_THEME_PRESET, Roles
from shared.config.logging import get_logger
from shared.security.password import hash_password

logger = get_logger(__name__)


DEMO_TENANT_SLUG = "demo"
DEMO_RESTAURANT_SLUG = "demo-kitchen"
DEMO_TABLES_PER_HALL = 4

# (category, sort_order, [(name, price_cents, cost_price_cents, is_veg, discount_percent)])
DEMO_MENU = [
    ("Starters", 1, [
        ("Paneer Tikka", 24000, 9000, True, 0),
        ("Chicken 65", 26000, 11000, False, 10),
        ("Veg Spring Roll", 18000, 6000, True, 0),
    ]),
    ("Main Course", 2, [
        ("Butter Chicken", 34000, 15000, False, 0),
        ("Dal Makhani", 22000, 7000, True, 0),
        ("Veg Biryani", 25000, 9000, True, 5),
    ]),
    ("Beverages", 3, [
        ("Masala Chai", 4000, 1000, True, 0),
        ("Fresh Lime Soda", 6000, 1500, True, 0),
    ]),
]


def seed_super_admin(db: Session) -> None:
    """Platform operator account. Idempotent."""
    if db.scalar(select(SuperAdmin.id).limit(1)):
        return
    db.add(SuperAdmin(
        email="superadmin@demo.com",
        password=hash_password("superadmin123"),
        name="Platform Admin",
    ))
    db.commit()
    logger.info("Super admin seeded")


def seed_menu(db: Session, restaurant: Restaurant) -> int:
    """Categories and products of the demo menu. Returns the product count."""
    count = 0
    for category_name, sort_order, products in DEMO_MENU:
        category = Category(
            tenant_id=restaurant.tenant_id,
            restaurant_id=restaurant.id,
            name=category_name,
            sort_order=sort_order,
        )
        db.add(category)
        db.flush()

        for position, (name, price, cost, is_veg, discount) in enumerate(products, start=1):
            db.add(Product(
                tenant_id=restaurant.tenant_id,
                restaurant_id=restaurant.id,
                category_id=category.id,
                name=name,
                price_cents=price,
                cost_price_cents=cost,
                is_veg=is_veg,
                discount_percent=discount,
                preparation_time_minutes=15,
                sort_order=position,
            ))
            count += 1
    return count


def seed(db: Session) -> None:
    """
    Seed the database with initial data.
    Idempotent: only inserts if data doesn't exist.
    """
    seed_super_admin(db)

    if db.scalar(select(Tenant.id).where(Tenant.slug == DEMO_TENANT_SLUG)):
        logger.info("Database already seeded, skipping")
        return

    logger.info("Seeding database")

    # ==========================================================================
    # Tenant & Restaurant
    # ==========================================================================
    tenant = Tenant(
        name="Demo Hospitality",
        slug=DEMO_TENANT_SLUG,
        contact_email="owner@demo.com",
    )
    db.add(tenant)
    db.flush()

    restaurant = Restaurant(
        tenant_id=tenant.id,
        name="Demo Kitchen",
        slug=DEMO_RESTAURANT_SLUG,
        phone="+919876543210",
        address="12 MG Road, Bengaluru",
        tagline="Fresh food, fast",
        opening_time="09:00",
        closing_time="23:00",
        theme_preset=DEFAULT_THEME_PRESET,
    )
    db.add(restaurant)
    db.flush()

    # ==========================================================================
    # Users
    # ==========================================================================
    owner = User(
        tenant_id=tenant.id,
        email="owner@demo.com",
        password=hash_password("owner123"),
        name="Demo Owner",
        role=Roles.OWNER,
    )
    manager = User(
        tenant_id=tenant.id,
        email="manager@demo.com",
        phone="+919800000001",
        password=hash_password("manager123"),
        name="Demo Manager",
        role=Roles.MANAGER,
    )
    waiter = User(
        tenant_id=tenant.id,
        email="waiter@demo.com",
        phone="+919800000002",
        password=hash_password("waiter123"),
        name="Demo Waiter",
        role=Roles.WAITER,
    )
    db.add_all([owner, manager, waiter])
    db.flush()

    db.add_all([
        RestaurantUser(tenant_id=tenant.id, user_id=manager.id, restaurant_id=restaurant.id, role=Roles.MANAGER),
        RestaurantUser(tenant_id=tenant.id, user_id=waiter.id, restaurant_id=restaurant.id, role=Roles.WAITER),
    ])

    # ==========================================================================
    # Floor
    # ==========================================================================
    table_number = 0
    for hall_name, is_ac in (("Main Hall", False), ("AC Hall", True)):
        hall = Hall(tenant_id=tenant.id, restaurant_id=restaurant.id, name=hall_name, is_ac=is_ac)
        db.add(hall)
        db.flush()
        for _ in range(DEMO_TABLES_PER_HALL):
            table_number += 1
            db.add(RestaurantTable(
                tenant_id=tenant.id,
                restaurant_id=restaurant.id,
                hall_id=hall.id,
                table_number=f"T{table_number}",
            ))

    # ==========================================================================
    # Menu
    # ==========================================================================
    product_count = seed_menu(db, restaurant)

    db.commit()
    logger.info(
        "Database seeded successfully",
        tenant_id=tenant.id,
        restaurant_id=restaurant.id,
        tables=table_number,
        products=product_count,
    )
