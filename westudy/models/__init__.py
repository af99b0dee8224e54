from westudy.models.user import User
from westudy.models.catalog import Category, UniversityArea, Amenity
from westudy.models.listing import Listing, ListingImage, ApprovalStatus, listing_amenities
from westudy.models.booking import Booking, BookingStatus
from westudy.models.message import Conversation, ConversationParticipant, Message
from westudy.models.auth_token import RevokedToken, PasswordResetToken
