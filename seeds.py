from dealership import create_app
from dealership.exceptions import ServiceLimitError
from dealership.models.query import Query
from dealership.services.common import _store
from dealership.services.service_service import ServiceService
from dealership.services.user_service import UserService
from dealership.services.vehicle_service import VehicleService
from dealership.utils.constants import Role, Table

DEMO_VEHICLES = [
    {"brand": "Toyota", "model": "RAV4", "year": 2023, "price": 28990000, "type": "SUV",
     "transmission": "Automática", "fuel": "Híbrido", "mileage": 12000, "engine": "2.5L",
     "power": "219 HP", "color": "Blanco", "features": "Cámara de retroceso, Apple CarPlay",
     "featured": True},
    {"brand": "Chevrolet", "model": "Camaro", "year": 2022, "price": 45990000, "type": "Coupé",
     "transmission": "Automática", "fuel": "Gasolina", "mileage": 8000, "engine": "6.2L V8",
     "power": "455 HP", "color": "Rojo", "features": "Asientos de cuero, Head-up display",
     "featured": True},
    {"brand": "Mitsubishi", "model": "L200", "year": 2018, "price": 15490000, "type": "Pickup",
     "transmission": "Manual", "fuel": "Diésel", "mileage": 98000, "engine": "2.4L",
     "power": "181 HP", "color": "Gris", "features": "4x4"},
    {"brand": "Subaru", "model": "WRX", "year": 2017, "price": 17990000, "type": "Sedán",
     "transmission": "Manual", "fuel": "Gasolina", "mileage": 76000, "engine": "2.0L Turbo",
     "power": "268 HP", "color": "Azul", "features": "AWD", "featured": True},
    {"brand": "Honda", "model": "Civic", "year": 2020, "price": 14990000, "type": "Sedán",
     "transmission": "Automática", "fuel": "Gasolina", "mileage": 41000, "engine": "1.5L Turbo",
     "power": "174 HP", "color": "Negro", "features": ""},
]

DEMO_SERVICES = [
    {"name": "Mantención general", "description": "Cambio de aceite, filtros y revisión de 30 puntos.",
     "price": 89990, "duration": "2 horas"},
    {"name": "Revisión técnica", "description": "Preparación y trámite de revisión técnica.",
     "price": 49990, "duration": "1 día"},
    {"name": "Detailing", "description": "Lavado completo, pulido y sellado de pintura.",
     "price": None, "duration": "4 horas"},
]


def ensure_admin(email: str, password: str):
    """Create the owner account once; re-running the seed keeps it."""
    user = UserService.find_user(email)
    if user:
        return user["id"]
    return UserService.create_user(email, password, name="Administrador", role=Role.ADMIN)["id"]


def main():
    app = create_app()
    with app.app_context():
        ensure_admin(app.config["ADMIN_EMAIL"], "Admin123")

        # ---- Demo inventory (create only if none exist) ----
        if not _store().select(Query(Table.VEHICLES).take(1)):
            for payload in DEMO_VEHICLES:
                VehicleService.admin_create_vehicle(payload)

        if not _store().select(Query(Table.SERVICES).take(1)):
            for payload in DEMO_SERVICES:
                try:
                    ServiceService.admin_add_service(payload)
                except ServiceLimitError:
                    break

        print("✅ Seed complete.")
        print(f"🔑 Admin login: {app.config['ADMIN_EMAIL']} / Admin123")


if __name__ == "__main__":
    main()
