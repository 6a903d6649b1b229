PET_FEE = 50
LINEN_FEE_PER_GUEST = 15


def compute_extras(has_pet: bool, needs_linen: bool, guests_in_beds: int) -> int:
    # Flat pet fee per quote; the pet count is not priced here.
    total = PET_FEE if has_pet else 0
    if needs_linen:
        total += guests_in_beds * LINEN_FEE_PER_GUEST
    return total
