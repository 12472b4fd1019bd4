class MarketplaceException(Exception):
    """市场系统基础异常类"""
    error_code = 'INTERNAL_ERROR'

    def __init__(self, message, code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['code'] = self.code
        rv['error'] = self.error_code
        rv['success'] = False
        return rv


class Unauthenticated(MarketplaceException):
    """未登录"""
    error_code = 'UNAUTHENTICATED'

    def __init__(self, message="Authentication required", payload=None):
        super().__init__(message, code=401, payload=payload)


class Forbidden(MarketplaceException):
    """权限不足"""
    error_code = 'FORBIDDEN'

    def __init__(self, message="Access denied", payload=None):
        super().__init__(message, code=403, payload=payload)


class NotFound(MarketplaceException):
    """资源不存在"""
    error_code = 'NOT_FOUND'

    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, code=404, payload=payload)


class ValidationFailed(MarketplaceException):
    """业务校验失败"""
    error_code = 'VALIDATION_FAILED'

    def __init__(self, message="Invalid data", payload=None):
        super().__init__(message, code=400, payload=payload)


class InsufficientInventory(MarketplaceException):
    """库存不足"""
    error_code = 'INSUFFICIENT_INVENTORY'

    def __init__(self, message="Insufficient inventory", payload=None):
        super().__init__(message, code=409, payload=payload)


class OrderNotModifiable(MarketplaceException):
    """订单当前状态不允许该操作"""
    error_code = 'ORDER_NOT_MODIFIABLE'

    def __init__(self, message="Order cannot be modified at this stage", payload=None):
        super().__init__(message, code=409, payload=payload)


class AlreadyExists(MarketplaceException):
    """唯一键冲突 (如订单号)"""
    error_code = 'ALREADY_EXISTS'

    def __init__(self, message="Resource already exists", payload=None):
        super().__init__(message, code=409, payload=payload)


class InternalError(MarketplaceException):
    """未预期的系统错误"""
    error_code = 'INTERNAL_ERROR'

    def __init__(self, message="Internal server error", payload=None):
        super().__init__(message, code=500, payload=payload)
