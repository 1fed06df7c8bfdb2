"""
Default Category Table

The categories seeded into every new home. The table is plain data:
HomeService.create_home receives it as an argument (falling back to
DEFAULT_CATEGORIES), so a deployment or a test can seed a different set.
"""

from homeledger.models.category import CategoryKind, DefaultCategory


DEFAULT_EXPENSE_CATEGORIES: list[DefaultCategory] = [
    # Bills
    DefaultCategory(name_tr="Kira", name_en="Rent", icon="home", color="#E57373", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="Aidat", name_en="Dues", icon="building", color="#EF5350", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="Elektrik", name_en="Electricity", icon="flash", color="#F48FB1", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="Su", name_en="Water", icon="water", color="#42A5F5", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="Doğalgaz", name_en="Gas", icon="fire", color="#FF7043", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="İnternet", name_en="Internet", icon="wifi", color="#7E57C2", kind=CategoryKind.EXPENSE),

    # Transport
    DefaultCategory(name_tr="Motosiklet Yakıtı", name_en="Motorcycle Fuel", icon="motorbike", color="#26A69A", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="Araba Yakıtı", name_en="Car Fuel", icon="car", color="#66BB6A", kind=CategoryKind.EXPENSE),

    # Subscriptions
    DefaultCategory(name_tr="Netflix", name_en="Netflix", icon="television", color="#E50914", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="Prime", name_en="Prime", icon="package-variant", color="#00A8E1", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="HBO", name_en="HBO", icon="filmstrip", color="#8E24AA", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="Spor Salonu", name_en="Gym", icon="dumbbell", color="#FF5722", kind=CategoryKind.EXPENSE),

    # Other
    DefaultCategory(name_tr="Market", name_en="Groceries", icon="cart", color="#8BC34A", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="Sağlık", name_en="Health", icon="hospital", color="#F44336", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="Eğlence", name_en="Entertainment", icon="party-popper", color="#9C27B0", kind=CategoryKind.EXPENSE),
    DefaultCategory(name_tr="Diğer Gider", name_en="Other Expense", icon="dots-horizontal", color="#9E9E9E", kind=CategoryKind.EXPENSE),
]

DEFAULT_INCOME_CATEGORIES: list[DefaultCategory] = [
    DefaultCategory(name_tr="Maaş", name_en="Salary", icon="cash", color="#4CAF50", kind=CategoryKind.INCOME),
    DefaultCategory(name_tr="Ek Gelir", name_en="Side Income", icon="wallet-plus", color="#8BC34A", kind=CategoryKind.INCOME),
    DefaultCategory(name_tr="Diğer Gelir", name_en="Other Income", icon="dots-horizontal", color="#9E9E9E", kind=CategoryKind.INCOME),
]

DEFAULT_CATEGORIES: list[DefaultCategory] = [
    *DEFAULT_EXPENSE_CATEGORIES,
    *DEFAULT_INCOME_CATEGORIES,
]
