from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, IntegerField, SelectField
from wtforms.validators import DataRequired, Length, NumberRange, Optional
from marketplace.models.trade import Order
from marketplace.utils.validators import validate_country_code, validate_phone

STATUS_CHOICES = [(s, s) for s in Order.STATUSES]


class JsonForm(FlaskForm):
    """
    从 JSON 字典构建的表单
    API 请求体是嵌套 JSON，取出当前层的标量字段作为 formdata，
    嵌套对象 (如地址) 交给对应的子表单
    """
    class Meta:
        csrf = False

    @classmethod
    def from_json(cls, payload):
        flat = MultiDict()
        for key, value in (payload or {}).items():
            if value is None or isinstance(value, (dict, list)):
                continue
            flat.add(key, str(value))
        return cls(formdata=flat)

    @classmethod
    def from_args(cls, args):
        """查询参数本身就是 MultiDict"""
        return cls(formdata=args)

    def first_error(self):
        for name, errors in self.errors.items():
            if errors:
                return f'{name}: {errors[0]}'
        return 'Invalid data'


class BillingAddressForm(JsonForm):
    """账单地址"""
    name = StringField('Name', validators=[DataRequired(), Length(max=128)])
    street = StringField('Street', validators=[DataRequired(), Length(max=256)])
    city = StringField('City', validators=[DataRequired(), Length(max=128)])
    state = StringField('State', validators=[Optional(), Length(max=128)])
    postal_code = StringField('Postal code', validators=[DataRequired(), Length(max=32)])
    country = StringField('Country', validators=[DataRequired(), validate_country_code])


class ShippingAddressForm(BillingAddressForm):
    """收货地址 (多一个联系电话)"""
    phone = StringField('Phone', validators=[Optional(), Length(max=32), validate_phone])


class OrderCreateForm(JsonForm):
    """下单：收货地址等嵌套字段单独校验"""
    tenant_id = IntegerField('Tenant', validators=[Optional()])
    notes = StringField('Notes', validators=[Optional(), Length(max=2000)])


class OrderStatusForm(JsonForm):
    """更新状态"""
    status = SelectField('Status', choices=STATUS_CHOICES, validators=[DataRequired()])
    tracking_number = StringField('Tracking number', validators=[Optional(), Length(max=64)])
    tracking_url = StringField('Tracking URL', validators=[Optional(), Length(max=256)])


class OrderCancelForm(JsonForm):
    reason = StringField('Reason', validators=[Optional(), Length(max=500)])


class OrderListForm(JsonForm):
    """列表过滤参数"""
    status = SelectField('Status', choices=[('', '')] + STATUS_CHOICES, validators=[Optional()])
    limit = IntegerField('Limit', validators=[Optional(), NumberRange(min=1, max=100)])
