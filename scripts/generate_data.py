"""
Synthetic Data Generator for the Storefront Orders service

This script generates a product catalog, a few users with roles and
sample orders. Orders go through OrderLifecycle, so prices, totals and
stock levels stay consistent with the catalog.
"""
import os
import sys
import time
import random
import uuid
from decimal import Decimal

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Setup Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

import django
django.setup()

from django.contrib.auth import get_user_model
from faker import Faker

from apps.catalog.models import Product
from apps.core.cache import cache_accelerator
from apps.core.exceptions import InsufficientStockException, OrderAlreadyExistsException
from apps.core.roles import Role, role_lookup
from apps.orders.lifecycle import OrderLifecycle
from apps.orders.models import Order
from apps.orders.notifications import OrderNotifier
from apps.orders.state import OrderStatus, PaymentMethod, PaymentStatus

fake = Faker()

User = get_user_model()


class SilentNotifier(OrderNotifier):
    """Seeded orders do not send confirmation emails."""

    def send_order_confirmation(self, order) -> bool:
        return False


def generate_users(count=20):
    """Generate customers plus one admin."""
    print(f"Generating {count} customers...")
    users = []

    admin, _ = User.objects.get_or_create(
        username='admin',
        defaults={'email': 'admin@storefront.local'}
    )
    admin.set_password('admin')
    admin.save()
    role_lookup.assign(admin, Role.ADMIN)

    for _ in range(count):
        email = fake.unique.email()
        user = User.objects.create_user(
            username=email.split('@')[0] + uuid.uuid4().hex[:4],
            email=email,
            password='password',
            first_name=fake.first_name(),
            last_name=fake.last_name()
        )
        role_lookup.assign(user, Role.CUSTOMER)
        users.append(user)

    print(f"Created {len(users)} customers and admin '{admin.username}'")
    return users


def generate_products(count=60):
    """Generate dummy products."""
    print(f"Generating {count} products...")

    product_templates = [
        ('Gaming Monitor', 'electronics', 299.99, 599.99),
        ('Wireless Headphones', 'electronics', 49.99, 299.99),
        ('Mechanical Keyboard', 'electronics', 79.99, 199.99),
        ('USB-C Hub', 'electronics', 19.99, 89.99),
        ('Running Shoes', 'sports', 49.99, 199.99),
        ('Yoga Mat', 'sports', 19.99, 79.99),
        ('Cotton T-Shirt', 'clothing', 14.99, 49.99),
        ('Winter Jacket', 'clothing', 79.99, 299.99),
        ('Coffee Maker', 'home', 29.99, 199.99),
        ('Air Fryer', 'home', 49.99, 199.99),
        ('Programming Book', 'books', 29.99, 79.99),
        ('Face Serum', 'beauty', 14.99, 69.99),
        ('Board Game', 'toys', 24.99, 59.99),
        ('Leather Wallet', 'accessories', 19.99, 99.99),
    ]

    products = []

    for template in product_templates:
        name_base, category, min_price, max_price = template
        # Create variations
        for _ in range(count // len(product_templates) + 1):
            if len(products) >= count:
                break

            variation = random.choice(['Pro', 'Lite', 'Plus', 'Max', 'Mini', 'Ultra', ''])
            full_name = f"{name_base} {variation}".strip()
            regular = Decimal(str(round(random.uniform(min_price, max_price), 2)))

            # About a quarter of the catalog is on sale
            sale = None
            if random.random() < 0.25:
                sale = (regular * Decimal('0.8')).quantize(Decimal('0.01'))

            product = Product.objects.create(
                name=full_name,
                company=fake.company(),
                category=category,
                description=fake.paragraph(nb_sentences=3),
                image_src=f"https://picsum.photos/seed/{uuid.uuid4().hex[:8]}/600/600",
                price_regular=regular,
                price_sale=sale,
                stock_quantity=random.randint(0, 200),
                track_inventory=random.random() > 0.1,
                sku=f"SKU-{uuid.uuid4().hex[:8].upper()}"
            )
            products.append(product)

    print(f"Created {len(products)} products")
    return products


def _place_order(lifecycle, items, customer, payment_status, payment_method):
    # Order numbers have millisecond resolution; retry on collision
    for _ in range(3):
        try:
            return lifecycle.create_order(
                items=items,
                customer=customer,
                payment_status=payment_status,
                payment_method=payment_method
            )
        except OrderAlreadyExistsException:
            time.sleep(0.002)
    return None


def generate_orders(users, products, count=80):
    """Generate orders through the lifecycle, then move some of them along."""
    print(f"Generating {count} orders...")
    lifecycle = OrderLifecycle(notifier=SilentNotifier())
    orders = []
    skipped = 0

    in_stock = [p for p in products if not p.track_inventory or p.stock_quantity > 0]
    if not in_stock:
        print("  No products in stock, skipping orders")
        return orders

    for _ in range(count):
        user = random.choice(users)
        lines = random.sample(in_stock, k=min(len(in_stock), random.randint(1, 3)))
        items = [{"product_id": p.pk, "quantity": random.randint(1, 3)} for p in lines]

        customer = {
            "name": user.get_full_name() or fake.name(),
            "email": user.email,
            "phone": fake.phone_number()[:30],
            "address": fake.street_address(),
            "city": fake.city(),
            "state": fake.state_abbr(),
            "zip": fake.postcode(),
        }
        payment_status = random.choices(
            [PaymentStatus.PAID.value, PaymentStatus.UNPAID.value],
            weights=[70, 30]
        )[0]

        try:
            order = _place_order(
                lifecycle,
                items,
                customer,
                payment_status,
                random.choice([m.value for m in PaymentMethod])
            )
        except InsufficientStockException:
            order = None

        if order is None:
            skipped += 1
            continue

        # Move some orders forward through fulfilment
        target = random.choices(
            [None, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED, 'cancel'],
            weights=[30, 20, 20, 20, 10]
        )[0]
        if target == 'cancel':
            order = lifecycle.cancel_order(order.pk).order
        elif target is not None:
            changes = {"status": target.value}
            if target != OrderStatus.PROCESSING:
                changes["tracking_number"] = f"TRK{random.randint(100000000, 999999999)}"
            order = lifecycle.admin_update(order.pk, changes)

        orders.append(order)

    print(f"Created {len(orders)} orders ({skipped} skipped)")
    return orders


def clear_all_data():
    """Clear all existing data."""
    print("Clearing existing data...")

    Order.objects.all().delete()
    Product.objects.all().delete()
    User.objects.filter(is_superuser=False).delete()
    cache_accelerator.invalidate_namespace('products')
    cache_accelerator.invalidate_namespace('product_detail')

    print("All data cleared")


def main():
    """Main function to generate all data."""
    print("\n" + "="*60)
    print("Storefront Synthetic Data Generator")
    print("="*60 + "\n")

    # Clear existing data
    clear_all_data()

    # Generate data in order of dependencies
    users = generate_users(20)
    products = generate_products(60)
    orders = generate_orders(users, products, 80)

    print("\n" + "="*60)
    print("Data Generation Complete!")
    print("="*60)
    print("\nSummary:")
    print(f"  - Customers: {len(users)}")
    print(f"  - Products: {len(products)}")
    print(f"  - Orders: {len(orders)}")
    print()


if __name__ == '__main__':
    main()
