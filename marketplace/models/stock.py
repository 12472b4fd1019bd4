from marketplace.extensions import db
from .base import BaseModel


class InventoryLog(BaseModel):
    """
    库存审计流水 (核心表)
    产品 inventory / sales_count 的每一次变动都在这里留痕，
    变动只能通过 InventoryService 写入
    """
    __tablename__ = 'stock_logs'

    TYPE_SALE = 'sale'        # 下单扣减
    TYPE_RESTORE = 'restore'  # 取消回补

    transaction_code = db.Column(db.String(40), index=True)  # 关联的订单号
    move_type = db.Column(db.String(20))

    product_id = db.Column(db.Integer, db.ForeignKey('biz_products.id'), index=True)
    order_id = db.Column(db.Integer, db.ForeignKey('trade_orders.id'), index=True)

    qty_change = db.Column(db.Integer, default=0)  # 库存变动 (-2, +2)，不跟踪库存时为 0
    sales_change = db.Column(db.Integer, default=0)  # 销量变动
    balance_after = db.Column(db.Integer, nullable=True)  # 变动后库存结余 (快照)

    remark = db.Column(db.String(255))

    product = db.relationship('Product')
    order = db.relationship('Order')
