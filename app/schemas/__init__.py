from app.schemas.primitives import Address, Wei, NonNegInt, Percent, HexData
