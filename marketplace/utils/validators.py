"""
表单验证器
"""
from wtforms.validators import ValidationError
import re


def validate_country_code(form, field):
    """验证国家代码 (ISO 3166-1 alpha-2)"""
    if field.data:
        if not re.match(r'^[A-Za-z]{2}$', field.data.strip()):
            raise ValidationError('请输入两位国家代码，如 US、CN')


def validate_phone(form, field):
    """验证电话号码格式 (国际格式，允许空格和连字符)"""
    if field.data:
        pattern = r'^\+?[0-9][0-9 \-]{5,30}$'
        if not re.match(pattern, field.data.strip()):
            raise ValidationError('请输入有效的电话号码')
