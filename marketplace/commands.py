import click
import random
from flask.cli import with_appcontext
from marketplace.extensions import db
from marketplace.models.auth import User, UserProfile
from marketplace.models.biz import Tenant, Product
from marketplace.models.cart import Cart, CartItem
from marketplace.models.trade import Order
from marketplace.models.stock import InventoryLog
from marketplace.services.validation_service import (
    PRODUCT_LIMITS, validate_slug, validate_price, validate_string, slugify,
)
from marketplace.utils.fake_gen import fake


@click.command('status')
@with_appcontext
def status():
    """
    [验证指令] 查看当前数据库中的数据统计。
    """
    click.echo(click.style('📊 市场数据库状态:', fg='cyan', bold=True))

    try:
        u_count = User.query.count()
        p_count = Product.query.count()
        c_count = Cart.query.count()
        o_count = Order.query.count()
        l_count = InventoryLog.query.count()

        click.echo(f" - 用户 (Users): \t{u_count}")
        click.echo(f" - 产品 (Products): \t{p_count}")
        click.echo(f" - 购物车 (Carts): \t{c_count}")
        click.echo(f" - 订单 (Orders): \t{o_count}")
        click.echo(f" - 库存流水 (Logs): \t{l_count}")

        if u_count > 0:
            click.echo(click.style('✔ 数据库连接正常，数据已存在。', fg='green'))
        else:
            click.echo(click.style('⚠ 数据库为空，请运行 flask forge 生成数据。', fg='yellow'))

    except Exception as e:
        click.echo(click.style(f'✘ 数据库读取失败: {str(e)}', fg='red'))
        click.echo("请检查是否执行了 'flask db upgrade'")


@click.command('forge')
@click.option('--scale', default=1, help='数据规模倍数 (默认1倍)')
@with_appcontext
def forge(scale):
    """
    [演示数据] 生成租户、用户、商品和购物车。
    警告：这将清除数据库中的现有数据！
    """
    click.echo(click.style(f'⚡ 初始化演示市场 (规模: {scale}x)...', fg='cyan', bold=True))

    db.drop_all()
    db.create_all()

    tenant = Tenant(name='Demo Market', slug='demo-market')
    db.session.add(tenant)
    db.session.flush()

    click.echo('正在创建用户...')
    admin, sellers, customers = init_users(tenant, scale)

    click.echo('正在上架商品...')
    products = init_products(tenant, sellers, scale)

    click.echo('正在填充购物车...')
    init_carts(tenant, customers, products)

    db.session.commit()
    click.echo(click.style('✔ 演示数据构建完成！', fg='green', bold=True))
    click.echo(f"管理员: {admin.email}")
    click.echo(f"数据统计: {len(sellers)} 卖家, {len(customers)} 顾客, {len(products)} 商品")


def init_users(tenant, scale=1):
    """初始化管理员、卖家、顾客"""
    admin = _make_user(tenant, 'admin@market.test', 'Admin', UserProfile.ROLE_ADMIN)

    sellers = [
        _make_user(tenant, f'seller{i}@market.test', fake.name(), UserProfile.ROLE_SELLER)
        for i in range(3 * scale)
    ]
    customers = [
        _make_user(tenant, f'customer{i}@market.test', fake.name(), UserProfile.ROLE_CUSTOMER)
        for i in range(10 * scale)
    ]
    db.session.flush()
    click.echo(f'  ✓ 已创建 {1 + len(sellers) + len(customers)} 个用户')
    return admin, sellers, customers


def _make_user(tenant, email, name, role):
    user = User(email=email, name=name)
    db.session.add(user)
    db.session.flush()
    db.session.add(UserProfile(user_id=user.id, tenant_id=tenant.id, default_role=role))
    return user


def init_products(tenant, sellers, scale=1):
    """商品经过与目录服务相同的业务规则校验"""
    products = []
    for i in range(20 * scale):
        name = validate_string(
            fake.product_title(), 'Name',
            max_length=PRODUCT_LIMITS['MAX_TITLE_LENGTH']
        )
        tracked = random.random() < 0.7
        p = Product(
            tenant_id=tenant.id,
            seller_id=random.choice(sellers).id,
            name=name,
            slug=validate_slug(f'{slugify(name)}-{i}'),
            sku=f'SKU-{i:05d}',
            description=validate_string(
                fake.sentence(nb_words=12), 'Description', required=False,
                max_length=PRODUCT_LIMITS['MAX_DESCRIPTION_LENGTH']
            ),
            price=validate_price(random.randint(2, 200) * 100 - 1),
            currency='usd',
            track_inventory=tracked,
            inventory=random.randint(0, 50) if tracked else None,
            sales_count=0,
            status=random.choice([Product.STATUS_ACTIVE] * 4 + [Product.STATUS_DRAFT]),
        )
        db.session.add(p)
        products.append(p)
    db.session.flush()
    click.echo(f'  ✓ 已创建 {len(products)} 个商品')
    return products


def init_carts(tenant, customers, products):
    """为每个顾客放入 1~3 个在售商品"""
    active = [p for p in products if p.status == Product.STATUS_ACTIVE]
    if not active:
        click.echo("  ⚠ 警告: 没有在售商品，跳过购物车")
        return

    for customer in customers:
        cart = Cart(tenant_id=tenant.id, user_id=customer.id, currency='usd')
        db.session.add(cart)
        db.session.flush()

        subtotal = 0
        count = 0
        for product in random.sample(active, k=min(len(active), random.randint(1, 3))):
            qty = random.randint(1, 2)
            db.session.add(CartItem(
                cart_id=cart.id,
                product_id=product.id,
                user_id=customer.id,
                quantity=qty,
                price=product.price,
                subtotal=product.price * qty
            ))
            subtotal += product.price * qty
            count += qty
        cart.subtotal = subtotal
        cart.item_count = count
    click.echo(f'  ✓ 已为 {len(customers)} 个顾客填充购物车')
