from faker import Faker
from faker.providers import BaseProvider


class MarketplaceProvider(BaseProvider):
    """
    市场演示数据生成器
    生成创作者市场风格的商品名
    """

    # 形容词前缀
    product_prefixes = [
        'Minimal', 'Retro', 'Neon', 'Handcrafted', 'Pixel', 'Vintage',
        'Cozy', 'Bold', 'Modular', 'Analog', 'Solar', 'Midnight'
    ]

    # 商品类型
    product_suffixes = [
        'Icon Pack', 'Notion Template', 'Font Family', 'Preset Bundle',
        'Sticker Sheet', 'Poster Print', 'Sound Kit', 'UI Kit',
        'Planner', 'Brush Set', 'Mockup', 'Wallpaper Pack'
    ]

    def product_title(self):
        """生成商品标题"""
        return f"{self.random_element(self.product_prefixes)} {self.random_element(self.product_suffixes)}"


# 初始化 Faker 并添加自定义 Provider
fake = Faker('en_US')
fake.add_provider(MarketplaceProvider)
