# 按照依赖顺序导入
from .base import BaseModel
from .auth import User, UserProfile
from .biz import Tenant, Product
from .cart import Cart, CartItem
from .trade import Order, OrderItem
from .payment import Payment
from .stock import InventoryLog
from .sys import AuditLog
