"""
审计日志工具模块
记录订单相关的重要操作，写入当前事务，随业务数据一起提交
"""
import json
from flask import request, has_request_context
from marketplace.models.sys import AuditLog
from marketplace.extensions import db


def log_action(module, action, user_id, details=None):
    """
    记录审计日志
    :param module: 模块名称 (如 'orders')
    :param action: 操作名称 (如 'create_order', 'cancel_order')
    :param details: 详细信息 (dict)
    """
    log = AuditLog(
        user_id=user_id,
        module=module,
        action=action,
        ip_address=request.remote_addr if has_request_context() else None,
        details=json.dumps(details, ensure_ascii=False, default=str) if details else None
    )
    db.session.add(log)
    return log
