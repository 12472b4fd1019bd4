from datetime import datetime
from marketplace.extensions import db


class BaseModel(db.Model):
    """
    模型基类：自增主键 + 创建/更新时间
    订单相关表只追加或修改状态，不提供删除方法
    """
    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self, exclude=()):
        """按列序列化为可直接 jsonify 的字典，时间转为 ISO 字符串"""
        data = {}
        for column in self.__table__.columns:
            if column.name in exclude:
                continue
            value = getattr(self, column.name)
            data[column.name] = value.isoformat() if isinstance(value, datetime) else value
        return data
