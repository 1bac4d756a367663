import logging

log = logging.getLogger(__name__)

CATEGORIES = [
    {
        "id": "fruits",
        "name": {"en": "Fruits", "vi": "Trái cây"},
        "description": {"en": "Fresh seasonal fruits", "vi": "Trái cây tươi theo mùa"},
        "slug": "fruits",
        "emoji": "🍎",
        "color": "bg-fresh-red/10",
        "image": "https://images.unsplash.com/photo-1619566636858-adf3ef46400b?w=800&h=600&fit=crop",
        "sortOrder": 1,
    },
    {
        "id": "vegetables",
        "name": {"en": "Vegetables", "vi": "Rau củ"},
        "description": {"en": "Farm-fresh vegetables", "vi": "Rau củ tươi từ trang trại"},
        "slug": "vegetables",
        "emoji": "🥬",
        "color": "bg-fresh-green/10",
        "image": "https://images.unsplash.com/photo-1540420773420-3366772f4999?w=800&h=600&fit=crop",
        "sortOrder": 2,
    },
    {
        "id": "tropical",
        "name": {"en": "Tropical Fruits", "vi": "Trái cây nhiệt đới"},
        "description": {"en": "Fresh tropical fruits from exotic locations",
                        "vi": "Trái cây nhiệt đới tươi từ các vùng đất xa xôi"},
        "slug": "tropical",
        "emoji": "🥭",
        "color": "bg-fresh-orange/10",
        "sortOrder": 3,
    },
    {
        "id": "bundles",
        "name": {"en": "Bundles", "vi": "Gói kết hợp"},
        "description": {"en": "Value fruit & vegetable bundles", "vi": "Gói trái cây và rau củ giá trị"},
        "slug": "bundles",
        "emoji": "🧺",
        "color": "bg-fresh-yellow/10",
        "image": "https://images.unsplash.com/photo-1542838132-92c53300491e?w=800&h=600&fit=crop",
        "sortOrder": 4,
    },
]

# "category" holds the slug here and is resolved to the category id at seed time
PRODUCTS = [
    {
        "name": {"en": "Fresh Strawberries", "vi": "Dâu tây tươi"},
        "description": {"en": "Sweet and juicy strawberries, perfect for desserts",
                        "vi": "Dâu tây ngọt và mọng nước, hoàn hảo cho món tráng miệng"},
        "price": 5.99, "originalPrice": 7.99,
        "image": "🍓", "category": "fruits",
        "rating": 4.8, "reviewsCount": 124, "unit": "lb", "origin": "California, USA",
        "badge": {"en": "Organic", "vi": "Hữu cơ"}, "badgeColor": "bg-fresh-green",
        "nutrition": {"calories": 32, "vitamin_c": 89, "fiber": 2, "sugar": 4.9},
        "isOrganic": True, "isSeasonal": True, "isFeatured": True,
    },
    {
        "name": {"en": "Organic Bananas", "vi": "Chuối hữu cơ"},
        "description": {"en": "Ripe yellow bananas, great source of potassium",
                        "vi": "Chuối vàng chín, nguồn kali tuyệt vời"},
        "price": 2.49,
        "image": "🍌", "category": "tropical",
        "rating": 4.6, "reviewsCount": 89, "unit": "lb", "origin": "Ecuador",
        "badge": {"en": "Popular", "vi": "Phổ biến"}, "badgeColor": "bg-fresh-yellow",
        "nutrition": {"calories": 89, "vitamin_c": 10, "fiber": 2.6, "sugar": 12},
        "isOrganic": True, "isFeatured": True,
    },
    {
        "name": {"en": "Honeycrisp Apples", "vi": "Táo Honeycrisp"},
        "description": {"en": "Crisp and sweet apples with amazing crunch",
                        "vi": "Táo giòn và ngọt với độ giòn tuyệt vời"},
        "price": 3.99, "originalPrice": 4.99,
        "image": "🍎", "category": "fruits",
        "rating": 4.9, "reviewsCount": 203, "unit": "lb", "origin": "Washington, USA",
        "badge": {"en": "Premium", "vi": "Cao cấp"}, "badgeColor": "bg-fresh-red",
        "nutrition": {"calories": 52, "vitamin_c": 5, "fiber": 2.4, "sugar": 10},
        "isSeasonal": True, "isFeatured": True,
    },
    {
        "name": {"en": "Fresh Oranges", "vi": "Cam tươi"},
        "description": {"en": "Juicy oranges packed with vitamin C", "vi": "Cam ngon ngọt giàu vitamin C"},
        "price": 3.49,
        "image": "🍊", "category": "fruits",
        "rating": 4.7, "reviewsCount": 156, "unit": "lb", "origin": "Florida, USA",
        "badge": {"en": "Vitamin C", "vi": "Vitamin C"}, "badgeColor": "bg-fresh-orange",
        "nutrition": {"calories": 47, "vitamin_c": 92, "fiber": 2.4, "sugar": 9},
    },
    {
        "name": {"en": "Baby Spinach", "vi": "Rau chân vịt non"},
        "description": {"en": "Tender organic spinach leaves, washed and ready",
                        "vi": "Lá rau chân vịt hữu cơ non, đã rửa sạch"},
        "price": 3.29,
        "image": "🥬", "category": "vegetables",
        "rating": 4.5, "reviewsCount": 61, "unit": "bag", "origin": "Đà Lạt, Việt Nam",
        "isOrganic": True,
    },
    {
        "name": {"en": "Organic Kale", "vi": "Cải xoăn hữu cơ"},
        "description": {"en": "Curly kale, rich in iron and fiber", "vi": "Cải xoăn giàu sắt và chất xơ"},
        "price": 2.99,
        "image": "🥗", "category": "vegetables",
        "rating": 4.3, "reviewsCount": 27, "unit": "bunch", "origin": "Đà Lạt, Việt Nam",
        "isOrganic": True, "inStock": False,
    },
    {
        "name": {"en": "Heirloom Tomatoes", "vi": "Cà chua gia truyền"},
        "description": {"en": "Colourful heirloom tomatoes, full of flavour",
                        "vi": "Cà chua gia truyền nhiều màu, đậm vị"},
        "price": 4.49,
        "image": "🍅", "category": "vegetables",
        "rating": 4.4, "reviewsCount": 42, "unit": "lb", "origin": "Lâm Đồng, Việt Nam",
        "isSeasonal": True,
    },
]

CONTENT = [
    {
        "key": "hero_title",
        "value": {"en": "Fresh Fruits Delivered Daily", "vi": "Trái cây tươi giao hàng hàng ngày"},
        "type": "text", "section": "hero", "sortOrder": 1,
    },
    {
        "key": "hero_subtitle",
        "value": {
            "en": "Farm-fresh fruits delivered to your doorstep. Support local farmers while "
                  "enjoying the finest quality produce at unbeatable prices.",
            "vi": "Trái cây tươi từ trang trại giao đến tận nhà. Hỗ trợ nông dân địa phương đồng thời "
                  "thưởng thức sản phẩm chất lượng cao nhất với giá cả không thể cạnh tranh hơn.",
        },
        "type": "text", "section": "hero", "sortOrder": 2,
    },
    {
        "key": "features_title",
        "value": {"en": "Why Choose Minh Phát?", "vi": "Tại sao chọn Minh Phát?"},
        "type": "text", "section": "features", "sortOrder": 1,
    },
    {
        "key": "newsletter_title",
        "value": {"en": "Stay Fresh with Our Newsletter", "vi": "Luôn cập nhật với Bản tin của chúng tôi"},
        "type": "text", "section": "newsletter", "sortOrder": 1,
    },
]


def seed(store, admin_username="admin", admin_password="admin123",
         admin_full_name="Administrator", admin_email="admin@minhphat.com"):
    """Fill an empty store. Safe to call on every start."""
    if store.count_admin_users() == 0:
        store.create_admin_user(admin_username, admin_password, admin_full_name, admin_email)
        log.info("[seed] admin user created: %s", admin_username)

    if store.get_all_products():
        log.info("[seed] products already exist, skipping catalog seed")
        return

    for cat in CATEGORIES:
        if not store.get_category_by_slug(cat["slug"]):
            store.create_category(cat)

    for prod in PRODUCTS:
        category = store.get_category_by_slug(prod["category"])
        store.create_product({**prod, "category": category["id"]})

    for item in CONTENT:
        if not store.get_content_by_key(item["key"], section=item["section"]):
            store.create_content(item)

    log.info("[seed] %s store seeded: %d categories, %d products, %d content entries",
             store.backend, len(CATEGORIES), len(PRODUCTS), len(CONTENT))
