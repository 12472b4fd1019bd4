import os
from marketplace import create_app
from marketplace.extensions import db
from marketplace.models import (
    User, UserProfile,
    Tenant, Product,
    Cart, CartItem,
    Order, OrderItem,
    Payment, InventoryLog, AuditLog
)

# 从环境变量获取配置模式
# 支持 FLASK_ENV (Railway) 或 FLASK_CONFIG
config_name = os.getenv('FLASK_ENV') or os.getenv('FLASK_CONFIG') or 'default'
if config_name in ('development', 'dev'):
    config_name = 'development'

app = create_app(config_name)


@app.shell_context_processor
def make_shell_context():
    """
    配置 Flask Shell 上下文。
    允许在命令行中使用 'flask shell' 时自动导入 db 和模型。
    """
    return dict(
        db=db,
        app=app,
        User=User,
        UserProfile=UserProfile,
        Tenant=Tenant,
        Product=Product,
        Cart=Cart,
        CartItem=CartItem,
        Order=Order,
        OrderItem=OrderItem,
        Payment=Payment,
        InventoryLog=InventoryLog,
        AuditLog=AuditLog,
    )


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=5000)
