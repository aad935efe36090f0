import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.member import MemberCreate
from app.models.product import ProductCreate
from app.repositories.member_repo import MemberRepository
from app.repositories.product_repo import ProductRepository

logger = logging.getLogger(__name__)

SAMPLE_MEMBERS = [
    {"name": "Ahmad Hidayat", "address": "Jl. Merdeka No. 10, Sindangjaya", "phone": "081234567890", "email": "ahmad@email.com", "status": "active"},
    {"name": "Siti Nurhaliza", "address": "Jl. Sudirman No. 25, Sindangjaya", "phone": "081234567891", "email": "siti@email.com", "status": "active"},
    {"name": "Budi Santoso", "address": "Jl. Gatot Subroto No. 5, Sindangjaya", "phone": "081234567892", "email": "budi@email.com", "status": "active"},
    {"name": "Dewi Lestari", "address": "Jl. Pahlawan No. 15, Sindangjaya", "phone": "081234567893", "email": "dewi@email.com", "status": "active"},
    {"name": "Rudi Hartono", "address": "Jl. Diponegoro No. 8, Sindangjaya", "phone": "081234567894", "email": "rudi@email.com", "status": "inactive"},
]

SAMPLE_PRODUCTS = [
    {"code": "BRG001", "name": "Beras Premium 5kg", "category": "Sembako", "cost_price": 65000, "sell_price": 75000, "stock_quantity": 50, "unit": "karung"},
    {"code": "BRG002", "name": "Minyak Goreng 2L", "category": "Sembako", "cost_price": 28000, "sell_price": 32000, "stock_quantity": 35, "unit": "botol"},
    {"code": "BRG003", "name": "Gula Pasir 1kg", "category": "Sembako", "cost_price": 12000, "sell_price": 15000, "stock_quantity": 40, "unit": "kg"},
    {"code": "BRG004", "name": "Tepung Terigu 1kg", "category": "Sembako", "cost_price": 10000, "sell_price": 13000, "stock_quantity": 45, "unit": "kg"},
    {"code": "BRG005", "name": "Garam 500g", "category": "Sembako", "cost_price": 4000, "sell_price": 6000, "stock_quantity": 60, "unit": "bungkus"},
    {"code": "BRG006", "name": "Aqua 600ml", "category": "Minuman", "cost_price": 2500, "sell_price": 3500, "stock_quantity": 100, "unit": "botol"},
    {"code": "BRG007", "name": "Teh Botol 350ml", "category": "Minuman", "cost_price": 3000, "sell_price": 4500, "stock_quantity": 80, "unit": "botol"},
    {"code": "BRG008", "name": "Kopi Kapal Api Sachet", "category": "Minuman", "cost_price": 1500, "sell_price": 2500, "stock_quantity": 150, "unit": "sachet"},
    {"code": "BRG009", "name": "Indomie Goreng", "category": "Makanan", "cost_price": 2500, "sell_price": 3500, "stock_quantity": 200, "unit": "bungkus"},
    {"code": "BRG010", "name": "Mie Sedaap Goreng", "category": "Makanan", "cost_price": 2500, "sell_price": 3500, "stock_quantity": 180, "unit": "bungkus"},
    {"code": "BRG011", "name": "Gudang Garam Surya", "category": "Rokok", "cost_price": 22000, "sell_price": 25000, "stock_quantity": 30, "unit": "bungkus"},
    {"code": "BRG012", "name": "Sampoerna Mild", "category": "Rokok", "cost_price": 25000, "sell_price": 28000, "stock_quantity": 25, "unit": "bungkus"},
    {"code": "BRG013", "name": "Sabun Lifebuoy", "category": "Kebersihan", "cost_price": 3000, "sell_price": 4500, "stock_quantity": 50, "unit": "buah"},
    {"code": "BRG014", "name": "Shampo Sunsachet", "category": "Kebersihan", "cost_price": 2000, "sell_price": 3000, "stock_quantity": 8, "unit": "sachet"},
    {"code": "BRG015", "name": "Pasta Gigi Pepsodent", "category": "Kebersihan", "cost_price": 8000, "sell_price": 12000, "stock_quantity": 40, "unit": "tube"},
]


class SeedService:
    """Loads sample members and products into an empty store."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.member_repo = MemberRepository(db)
        self.product_repo = ProductRepository(db)

    async def seed(self) -> tuple[bool, str]:
        members = await self.member_repo.list_members()
        products = await self.product_repo.list_products()
        if members or products:
            return False, "Data already exists. Remove existing members and products before seeding again."

        for member in SAMPLE_MEMBERS:
            await self.member_repo.create_member(MemberCreate(**member))
        for product in SAMPLE_PRODUCTS:
            await self.product_repo.create_product(ProductCreate(**product))

        logger.info("Seeded %s members and %s products", len(SAMPLE_MEMBERS), len(SAMPLE_PRODUCTS))
        return True, f"Added {len(SAMPLE_MEMBERS)} members and {len(SAMPLE_PRODUCTS)} products."
