from fastapi import APIRouter

from sfa.api.v1 import (
    auth_routes,
    branch_routes,
    company_routes,
    collection_routes,
    customer_routes,
    health,
    invoice_routes,
    order_routes,
    product_routes,
    report_routes,
    route_routes,
    upload_routes,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth_routes.router, prefix="/auth", tags=["Auth"])
api_router.include_router(company_routes.router, prefix="/companies", tags=["Companies"])
api_router.include_router(branch_routes.router, prefix="/branches", tags=["Branches"])
api_router.include_router(customer_routes.router, prefix="/customers", tags=["Customers"])
api_router.include_router(product_routes.router, prefix="/products", tags=["Products"])
api_router.include_router(route_routes.router, prefix="/routes", tags=["Routes"])
api_router.include_router(order_routes.router, prefix="/orders", tags=["Sale Orders"])
api_router.include_router(invoice_routes.router, prefix="/invoices", tags=["Invoices"])
api_router.include_router(collection_routes.router, prefix="/collections", tags=["Collections"])
api_router.include_router(upload_routes.router, prefix="/uploads", tags=["Bulk Uploads"])
api_router.include_router(report_routes.router, prefix="/reports", tags=["Reports"])
