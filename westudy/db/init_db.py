import logging
from datetime import date, timedelta
from decimal import Decimal

import psycopg2
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT
from sqlalchemy.orm import Session

from westudy.core.config import settings
from westudy.core.security import get_password_hash
from westudy.models.booking import Booking, BookingStatus
from westudy.models.catalog import Amenity, Category, UniversityArea
from westudy.models.listing import ApprovalStatus, Listing, ListingImage
from westudy.models.message import Conversation, ConversationParticipant, Message
from westudy.models.user import User
from westudy.services.bookings import quote_total
from westudy.services.listings import (
    DEFAULT_CANCELLATION_POLICY,
    DEFAULT_HOUSE_RULES,
    DEFAULT_SAFETY_AND_PROPERTY,
)
from westudy.utils.dates import utcnow

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "westudy123"


def create_database():
    """Create database if it doesn't exist."""
    try:
        # Connect to default 'postgres' database to check/create target DB
        con = psycopg2.connect(
            user=settings.POSTGRES_USER,
            password=settings.POSTGRES_PASSWORD,
            host=settings.POSTGRES_SERVER,
            port=settings.POSTGRES_PORT,
            dbname="postgres"
        )
        con.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)
        cur = con.cursor()

        # Check if DB exists
        cur.execute("SELECT 1 FROM pg_catalog.pg_database WHERE datname = %s", (settings.POSTGRES_DB,))
        exists = cur.fetchone()

        if not exists:
            logger.info("Database %s does not exist. Creating...", settings.POSTGRES_DB)
            cur.execute(f'CREATE DATABASE "{settings.POSTGRES_DB}"')
            logger.info("Database %s created successfully.", settings.POSTGRES_DB)
        else:
            logger.info("Database %s already exists.", settings.POSTGRES_DB)

        cur.close()
        con.close()
    except psycopg2.Error as e:
        # Proceeding anyway, maybe it exists or connection params are for the target DB directly
        logger.error("Error creating database: %s", e)


# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------

AMENITIES = [
    ("wifi", "Wi-Fi", "Wifi"),
    ("tv", "TV", "Tv"),
    ("kitchen", "Cozinha Equipada", "Utensils"),
    ("ac", "Ar Condicionado", "Snowflake"),
    ("parking", "Estacionamento", "Car"),
    ("privBathroom", "Banheiro Privativo", "Bath"),
    ("gym", "Academia", "Dumbbell"),
    ("laundry", "Lavanderia", "WashingMachine"),
    ("studyArea", "Área de Estudos", "LampDesk"),
    ("commonArea", "Área Comum", "Trees"),
    ("allBillsIncluded", "Contas Inclusas", "CheckSquare"),
]

UNIVERSITIES = [
    ("usp-butanta", "Universidade de São Paulo", "USP", "São Paulo", "Butantã", -23.5595, -46.7313),
    ("unicamp-barao", "Universidade Estadual de Campinas", "Unicamp", "Campinas", "Barão Geraldo", -22.8178, -47.0687),
    ("ufmg-pampulha", "Universidade Federal de Minas Gerais", "UFMG", "Belo Horizonte", "Pampulha", -19.8665, -43.9607),
    ("puc-rio", "Pontifícia Universidade Católica do Rio de Janeiro", "PUC-Rio", "Rio de Janeiro", "Gávea", -22.9777, -43.2331),
    ("ufsc-trindade", "Universidade Federal de Santa Catarina", "UFSC", "Florianópolis", "Trindade", -27.5999, -48.5172),
]

CATEGORIES = [
    ("design", "Design", "Palette", "Quartos com decoração e design diferenciados."),
    ("prox-campus", "Perto do Campus", "School", "Quartos a uma curta distância da universidade."),
    ("republica", "Repúblicas", "Building", "Vagas em repúblicas estudantis animadas."),
    ("kitnet", "Kitnets", "Home", "Espaços compactos e independentes."),
    ("alto-padrao", "Alto Padrão", "Castle", "Quartos com luxo e comodidades premium."),
    ("economico", "Econômicos", "Bed", "Opções acessíveis para quem quer economizar."),
    ("praia", "Praia", "Waves", "Perto da praia."),
    ("campo", "Campo", "Trees", "Refúgios no campo."),
    ("montanha", "Montanhas", "MountainSnow", "Cabanas e vistas incríveis."),
    ("deserto", "Deserto", "Sun", "Aventura no deserto."),
    ("camping", "Camping", "Tent", "Experiências de acampamento."),
]

USERS = [
    # key, name, email, is_admin
    ("user", "Usuário Comum", "usuario@exemplo.com", False),
    ("admin", "Admin WeStudy", "admin@westudy.com", True),
    ("ana", "Ana Silva", "ana.silva@exemplo.com", False),
    ("carlos", "Carlos Souza", "carlos.souza@exemplo.com", False),
]

LISTINGS = [
    {
        "key": "quarto1",
        "title": "Quarto Aconchegante Próximo à USP",
        "description": "Quarto individual mobiliado, ideal para estudantes da USP. Ambiente tranquilo e seguro, com área de estudos e internet de alta velocidade. Contas inclusas.",
        "monthly_price": "1200.00",
        "address": "Rua do Matão, 1010, Butantã, São Paulo - SP",
        "lat": -23.5580, "lng": -46.7250, "bedrooms": 1, "baths": 1,
        "amenities": ["wifi", "kitchen", "studyArea", "allBillsIncluded"],
        "rating": "4.81", "review_count": 45, "university": "usp-butanta",
        "room_type": "Quarto Individual", "category": "prox-campus",
        "images": ["Vista do quarto aconchegante", "Área de estudos do quarto"],
    },
    {
        "key": "quarto2",
        "title": "Kitnet Completa na Unicamp",
        "description": "Kitnet para uma pessoa, totalmente equipada, a poucos minutos da Unicamp. Inclui cozinha compacta, banheiro privativo e Wi-Fi. Perfeito para quem busca praticidade.",
        "monthly_price": "950.00",
        "address": "Av. Albino J. B. de Oliveira, 1500, Barão Geraldo, Campinas - SP",
        "lat": -22.8145, "lng": -47.0700, "bedrooms": 1, "baths": 1,
        "amenities": ["wifi", "tv", "kitchen", "privBathroom"],
        "rating": "4.53", "review_count": 30, "university": "unicamp-barao",
        "room_type": "Kitnet", "category": "kitnet",
        "cancellation_policy": "Cancelamento moderado: Reembolso total até 15 dias antes do check-in.",
        "house_rules": "Permitido animais de pequeno porte.\nVisitas com aviso prévio.",
        "safety_and_property": "Kit de primeiros socorros.",
        "images": ["Visão geral da kitnet", "Cozinha compacta da kitnet", "Banheiro da kitnet"],
    },
    {
        "key": "quarto3",
        "title": "Vaga em República perto da UFMG",
        "description": "Vaga em quarto compartilhado em república estudantil bem localizada na Pampulha, próxima à UFMG. Casa com ótima infraestrutura, incluindo lavanderia e área comum.",
        "monthly_price": "700.00",
        "address": "Rua Prof. Baeta Viana, 200, Pampulha, Belo Horizonte - MG",
        "lat": -19.8690, "lng": -43.9630, "bedrooms": 1, "baths": 2,
        "amenities": ["wifi", "laundry", "commonArea"],
        "rating": "4.20", "review_count": 22, "university": "ufmg-pampulha",
        "room_type": "Vaga em República", "category": "republica",
        "house_rules": "Respeitar os horários dos colegas de quarto.\nLimpeza semanal colaborativa.",
        "images": ["Quarto compartilhado na república"],
    },
    {
        "key": "quarto4",
        "title": "Studio Design na Gávea (PUC-Rio)",
        "description": "Studio elegante e funcional, perfeito para estudantes da PUC-Rio. Totalmente mobiliado, com design moderno, ar condicionado e cozinha americana. Prédio com portaria 24h.",
        "monthly_price": "1500.00",
        "address": "Rua Marquês de São Vicente, 225, Gávea, Rio de Janeiro - RJ",
        "lat": -22.9750, "lng": -43.2300, "bedrooms": 0, "baths": 1,
        "amenities": ["wifi", "tv", "kitchen", "ac", "privBathroom"],
        "rating": "4.92", "review_count": 55, "university": "puc-rio",
        "room_type": "Studio", "category": "design",
        "cancellation_policy": "Cancelamento restrito: Sem reembolso após a reserva.",
        "house_rules": "Não são permitidas crianças.\nApenas o hóspede registrado pode pernoitar.",
        "safety_and_property": "Portaria 24h com controle de acesso.",
        "images": ["Interior do studio moderno", "Detalhe da cozinha americana"],
    },
    {
        "key": "quarto5",
        "title": "Quarto Econômico e Charmoso (UFSC)",
        "description": "Quarto espaçoso em apartamento compartilhado, com varanda privativa e vista para área verde. Localizado no coração da Trindade, ideal para alunos da UFSC.",
        "monthly_price": "680.00",
        "address": "Rua Lauro Linhares, 1000, Trindade, Florianópolis - SC",
        "lat": -27.6015, "lng": -48.5190, "bedrooms": 1, "baths": 1,
        "amenities": ["wifi", "studyArea", "commonArea", "gym"],
        "rating": "4.35", "review_count": 18, "university": "ufsc-trindade",
        "room_type": "Quarto em Apartamento", "category": "economico",
        "images": ["Quarto amplo com acesso à varanda"],
    },
    {
        "key": "quarto6",
        "title": "Quarto Alto Padrão USP",
        "description": "Opção de luxo para estudantes da USP. Quarto amplo, totalmente decorado, com todas as contas inclusas e limpeza semanal.",
        "monthly_price": "1850.00",
        "address": "Av. Prof. Luciano Gualberto, 380, Butantã, São Paulo - SP",
        "lat": -23.5600, "lng": -46.7200, "bedrooms": 1, "baths": 1,
        "amenities": ["wifi", "tv", "kitchen", "ac", "privBathroom", "allBillsIncluded"],
        "rating": "4.95", "review_count": 60, "university": "usp-butanta",
        "room_type": "Quarto Alto Padrão", "category": "alto-padrao",
        "images": ["Quarto alto padrão decorado", "Banheiro do quarto alto padrão"],
    },
    {
        "key": "quarto7",
        "title": "Suíte Privativa Unicamp (Moradia Estudantil)",
        "description": "Suíte individual em moradia estudantil organizada, próxima à Unicamp. Comodidades incluem cozinha compartilhada e lavanderia. Ideal para foco nos estudos.",
        "monthly_price": "1050.00",
        "address": "Rua Bertrand Russell, 500, Barão Geraldo, Campinas - SP",
        "lat": -22.8200, "lng": -47.0650, "bedrooms": 1, "baths": 1,
        "amenities": ["wifi", "privBathroom", "laundry", "studyArea"],
        "rating": "4.66", "review_count": 28, "university": "unicamp-barao",
        "room_type": "Suíte", "category": "prox-campus",
        "images": ["Suíte privativa mobiliada"],
    },
    {
        "key": "quarto8",
        "title": "Quarto em República Descolada (UFMG)",
        "description": "Quarto em república com galera animada e muitas áreas comuns. Perto da UFMG, ideal para quem gosta de socializar. Wi-Fi e contas inclusas.",
        "monthly_price": "750.00",
        "address": "Rua Flor-de-índio, 123, Ouro Preto, Belo Horizonte - MG",
        "lat": -19.9000, "lng": -43.9500, "bedrooms": 1, "baths": 2,
        "amenities": ["wifi", "kitchen", "commonArea", "allBillsIncluded"],
        "rating": "4.40", "review_count": 25, "university": "ufmg-pampulha",
        "room_type": "Quarto em República", "category": "republica",
        "images": ["Quarto com vista para a lagoa", "Área comum da república"],
    },
    {
        "key": "quarto9",
        "title": "Kitnet Funcional Próx. PUC-Rio",
        "description": "Kitnet compacta e funcional, ideal para um estudante. Totalmente mobiliada, próxima à PUC-Rio e comércio local. Contas não inclusas.",
        "monthly_price": "1300.00",
        "address": "Rua Vice-Governador Rubens Berardo, 50, Gávea, Rio de Janeiro - RJ",
        "lat": -22.9760, "lng": -43.2320, "bedrooms": 1, "baths": 1,
        "amenities": ["wifi", "tv", "kitchen", "ac"],
        "rating": "4.60", "review_count": 33, "university": "puc-rio",
        "room_type": "Kitnet", "category": "kitnet",
        "images": ["Visão geral da kitnet"],
    },
]

# conversation -> (other participant, [(sender, text, minutes ago)])
CONVERSATIONS = [
    ("ana", [
        ("ana", "Olá! Tudo bem com o quarto?", 120),
        ("user", "Oi Ana! Tudo ótimo, e com você?", 116),
        ("ana", "Tudo certo também! Só queria confirmar se o Wi-Fi está funcionando bem.", 110),
        ("user", "Sim, está perfeito! Velocidade boa.", 100),
    ]),
    ("carlos", [
        ("carlos", "E aí, tudo pronto para a mudança?", 60),
        ("user", "Quase! Ansioso.", 56),
    ]),
    ("admin", [
        ("admin", "Bem-vindo ao WeStudy! Se precisar de algo, é só chamar.", 60 * 24),
        ("user", "Obrigado!", 50 * 24),
    ]),
]


def seed_demo_data(db: Session) -> bool:
    """
    Load the demo catalog, users, listings, bookings and conversations.

    Does nothing when the catalog is already populated. Returns True if
    data was inserted.
    """
    if db.query(Category).first():
        logger.info("Demo data already present, skipping seed.")
        return False

    amenities = {a_id: Amenity(id=a_id, name=name, icon_name=icon) for a_id, name, icon in AMENITIES}
    db.add_all(amenities.values())
    db.add_all(
        UniversityArea(id=u_id, name=name, acronym=acronym, city=city, neighborhood=hood, lat=lat, lng=lng)
        for u_id, name, acronym, city, hood, lat, lng in UNIVERSITIES
    )
    db.add_all(
        Category(id=c_id, label=label, icon_name=icon, description=description)
        for c_id, label, icon, description in CATEGORIES
    )

    password_hash = get_password_hash(DEMO_PASSWORD)
    users = {}
    for key, name, email, is_admin in USERS:
        users[key] = User(
            name=name,
            email=email,
            password_hash=password_hash,
            avatar_url=f"https://picsum.photos/seed/{key}/40/40",
            is_admin=is_admin,
        )
    db.add_all(users.values())

    listings = {}
    for row in LISTINGS:
        key = row["key"]
        listing = Listing(
            title=row["title"],
            description=row["description"],
            monthly_price=Decimal(row["monthly_price"]),
            address=row["address"],
            lat=row["lat"],
            lng=row["lng"],
            guests=1,
            bedrooms=row["bedrooms"],
            beds=1,
            baths=row["baths"],
            amenities=[amenities[a] for a in row["amenities"]],
            rating=Decimal(row["rating"]),
            review_count=row["review_count"],
            host=users["admin"],
            university_id=row["university"],
            category_id=row["category"],
            room_type=row["room_type"],
            is_available=True,
            approval_status=ApprovalStatus.approved,
            cancellation_policy=row.get("cancellation_policy", DEFAULT_CANCELLATION_POLICY),
            house_rules=row.get("house_rules", DEFAULT_HOUSE_RULES),
            safety_and_property=row.get("safety_and_property", DEFAULT_SAFETY_AND_PROPERTY),
        )
        listing.images = [
            ListingImage(url=f"https://picsum.photos/seed/{key}_img{i + 1}/800/600", alt=alt, display_order=i)
            for i, alt in enumerate(row["images"])
        ]
        listings[key] = listing
    db.add_all(listings.values())

    # One running stay that holds quarto2, one finished stay on quarto5
    today = date.today()
    running = listings["quarto2"]
    running.is_available = False
    check_in, check_out = today - timedelta(days=30), today + timedelta(days=105)
    db.add(Booking(
        user=users["user"],
        listing=running,
        check_in_date=check_in,
        check_out_date=check_out,
        guests=1,
        total_price=quote_total(running.monthly_price, check_in, check_out),
        status=BookingStatus.confirmed,
    ))
    past = listings["quarto5"]
    check_in, check_out = today - timedelta(days=230), today - timedelta(days=95)
    db.add(Booking(
        user=users["user"],
        listing=past,
        check_in_date=check_in,
        check_out_date=check_out,
        guests=1,
        total_price=quote_total(past.monthly_price, check_in, check_out),
        status=BookingStatus.completed,
        booked_at=utcnow() - timedelta(days=240),
    ))

    now = utcnow()
    for other, messages in CONVERSATIONS:
        conversation = Conversation(created_at=now - timedelta(minutes=messages[0][2] + 1))
        conversation.participants = [
            ConversationParticipant(user=users["user"]),
            ConversationParticipant(user=users[other], last_read_at=now),
        ]
        conversation.messages = [
            Message(sender=users[sender], content=text, created_at=now - timedelta(minutes=ago))
            for sender, text, ago in messages
        ]
        db.add(conversation)

    db.commit()
    logger.info(
        "Seeded %d listings, %d users and %d conversations.",
        len(listings), len(users), len(CONVERSATIONS),
    )
    return True


if __name__ == "__main__":
    create_database()
