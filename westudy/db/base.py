from westudy.db.session import Base
from westudy.models.user import User
from westudy.models.catalog import Category, UniversityArea, Amenity
from westudy.models.listing import Listing, ListingImage
from westudy.models.booking import Booking
from westudy.models.message import Conversation, ConversationParticipant, Message
from westudy.models.auth_token import RevokedToken, PasswordResetToken
