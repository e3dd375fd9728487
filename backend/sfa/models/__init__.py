from .base import Base
from .company import Company
from .branch import Branch
from .user import AppUser
from .customer import Customer
from .product import Brand, Product, ProductPrice
from .route import Route, RouteCustomerMapping, UserRouteMapping
from .sales import SaleOrderHeader, SaleOrderDetail, SalesInvoiceHeader, SalesInvoiceDetail
from .collection import Collection, CollectionLine
from .inventory import DailyStock, AgeWiseOutstanding
from .bulk_upload import BulkUploadRef
