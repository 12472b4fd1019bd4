from flask import current_app
from sqlalchemy import case, func
from marketplace.extensions import db
from marketplace.exceptions import InsufficientInventory
from marketplace.models.biz import Product
from marketplace.models.stock import InventoryLog


class InventoryService:
    """
    库存台账
    产品 inventory / sales_count 只能经由本服务修改，每次变动写一条 InventoryLog。
    调用方需在 atomic() 事务内调用，本服务不提交。
    """

    @staticmethod
    def deduct_for_sale(snapshot: Product, quantity: int, order) -> InventoryLog:
        """
        下单扣减
        :param snapshot: 校验阶段已读取 (并加锁) 的产品对象；扣减本身以数据库当前库存为准，
                         并发下被他人抢先售出时抛出 InsufficientInventory
        :param quantity: 正整数
        """
        qty_change = 0
        if snapshot.tracks_stock:
            if snapshot.inventory - quantity < 0:
                raise InsufficientInventory(
                    f'Insufficient inventory for {snapshot.name}',
                    payload={'product_id': snapshot.id, 'available': snapshot.inventory}
                )
            qty_change = -quantity

        return InventoryService._apply(
            snapshot,
            qty_change=qty_change,
            sales_change=quantity,
            move_type=InventoryLog.TYPE_SALE,
            order=order,
            remark=f'下单扣减 - {order.order_number}'
        )

    @staticmethod
    def restore_for_order_items(order_items, order) -> list:
        """
        取消回补 (补偿操作)
        每个商品重新读取当前值；跟踪库存的商品 inventory 加回，
        sales_count 减回并以 0 为下限。
        """
        logs = []
        for item in order_items:
            product = db.session.get(
                Product, item.product_id,
                with_for_update=True, populate_existing=True
            )
            if not product:
                current_app.logger.warning(
                    f'回补库存时商品 {item.product_id} 不存在，跳过 (订单 {order.order_number})'
                )
                continue

            qty_change = item.quantity if product.tracks_stock else 0
            sales_change = -min(item.quantity, product.sales_count or 0)

            logs.append(InventoryService._apply(
                product,
                qty_change=qty_change,
                sales_change=sales_change,
                move_type=InventoryLog.TYPE_RESTORE,
                order=order,
                remark=f'取消回补 - {order.order_number}'
            ))
        return logs

    @staticmethod
    def _apply(product, qty_change, sales_change, move_type, order, remark):
        """
        唯一的库存写入口
        以数据库当前值为基准做条件 UPDATE，不使用内存中的旧值；
        扣减时附加 inventory >= 数量 的条件，命中 0 行即视为库存不足。
        """
        sales = func.coalesce(Product.sales_count, 0) + sales_change
        values = {Product.sales_count: case((sales < 0, 0), else_=sales)}

        query = Product.query.filter(Product.id == product.id)
        if qty_change:
            values[Product.inventory] = Product.inventory + qty_change
            if qty_change < 0:
                query = query.filter(Product.inventory >= -qty_change)

        if query.update(values, synchronize_session=False) == 0:
            raise InsufficientInventory(
                f'Insufficient inventory for {product.name}',
                payload={'product_id': product.id}
            )
        # 读回写入后的真实结余
        db.session.refresh(product)

        log = InventoryLog(
            transaction_code=order.order_number,
            move_type=move_type,
            product_id=product.id,
            order_id=order.id,
            qty_change=qty_change,
            sales_change=sales_change,
            balance_after=product.inventory if product.tracks_stock else None,
            remark=remark
        )
        db.session.add(log)
        return log
