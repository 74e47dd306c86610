"""Initial access-control schema: users, pets, medical records, pet access

Revision ID: 001
Revises:
Create Date: 2025-06-02 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('updated_by', sa.Uuid(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.text('false'), nullable=False),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table('users',
        *_audit_columns(),
        sa.Column('email', sa.String(length=255), nullable=False, comment="User's email address"),
        sa.Column('first_name', sa.String(length=100), nullable=False, comment="User's first name"),
        sa.Column('last_name', sa.String(length=100), nullable=False, comment="User's last name"),
        sa.Column('role', sa.Enum('owner', 'veterinarian', 'admin', name='userrole'), nullable=False,
                  comment="User's role in the platform, immutable after registration"),
        sa.Column('phone_number', sa.String(length=20), nullable=True, comment="User's phone number"),
        sa.Column('clinic_name', sa.String(length=200), nullable=True, comment='Clinic the veterinarian works at'),
        sa.Column('license_number', sa.String(length=50), nullable=True, comment='Veterinary license number'),
        sa.Column('specialization', sa.String(length=100), nullable=True, comment='Veterinary specialization'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('idx_users_name_search', 'users', ['first_name', 'last_name'])

    # Create pets table
    op.create_table('pets',
        *_audit_columns(),
        sa.Column('owner_id', sa.Uuid(), nullable=False, comment="UUID of the pet's owner"),
        sa.Column('name', sa.String(length=100), nullable=False, comment="Pet's name"),
        sa.Column('species', sa.Enum('dog', 'cat', 'bird', 'rabbit', 'hamster', 'guinea_pig', 'ferret', 'reptile', 'fish', 'other', name='petspecies'),
                  nullable=False, comment="Pet's species"),
        sa.Column('breed', sa.String(length=100), nullable=True, comment="Pet's breed"),
        sa.Column('gender', sa.Enum('male', 'female', 'unknown', name='petgender'), nullable=False, comment="Pet's gender"),
        sa.Column('birth_date', sa.Date(), nullable=True, comment="Pet's birth date"),
        sa.Column('weight_kg', sa.Numeric(precision=5, scale=2), nullable=True, comment="Pet's weight in kilograms"),
        sa.Column('color', sa.String(length=100), nullable=True, comment='Coat or skin color'),
        sa.Column('photo_url', sa.String(length=500), nullable=True, comment="URL to pet's profile photo"),
        sa.Column('allergies', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=True, comment='Known allergies'),
        sa.Column('chronic_conditions', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=True, comment='Chronic conditions'),
        sa.Column('emergency_contact', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=True, comment='Emergency contact information'),
        sa.CheckConstraint('weight_kg IS NULL OR weight_kg > 0', name='ck_pets_weight_positive'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pets_owner_id', 'pets', ['owner_id'])
    op.create_index('ix_pets_species', 'pets', ['species'])
    op.create_index('idx_pets_owner_name', 'pets', ['owner_id', 'name'])

    # Create medical_records table
    op.create_table('medical_records',
        *_audit_columns(),
        sa.Column('pet_id', sa.Uuid(), nullable=False, comment='UUID of the pet this record belongs to'),
        sa.Column('record_type', sa.Enum('checkup', 'vaccination', 'medication', 'surgery', 'lab_result', 'other', name='medicalrecordtype'),
                  nullable=False, comment='Kind of medical record'),
        sa.Column('record_date', sa.DateTime(timezone=True), nullable=False, comment='Date of the medical event'),
        sa.Column('veterinarian_id', sa.Uuid(), nullable=True, comment='Veterinarian responsible for the record'),
        sa.Column('notes', sa.Text(), nullable=True, comment='Free-text clinical notes'),
        sa.Column('attachments', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False,
                  comment='Attachment metadata: filename, file_url, file_type'),
        sa.ForeignKeyConstraint(['pet_id'], ['pets.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['veterinarian_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_medical_records_pet_id', 'medical_records', ['pet_id'])
    op.create_index('ix_medical_records_veterinarian_id', 'medical_records', ['veterinarian_id'])
    op.create_index('idx_medical_records_pet_date', 'medical_records', ['pet_id', 'record_date'])

    # Create pet_access table
    op.create_table('pet_access',
        *_audit_columns(),
        sa.Column('pet_id', sa.Uuid(), nullable=False, comment='Pet the access applies to'),
        sa.Column('veterinarian_id', sa.Uuid(), nullable=False, comment='Veterinarian receiving access'),
        sa.Column('granted_by_id', sa.Uuid(), nullable=False,
                  comment='Owner who granted access; the only user allowed to revoke it'),
        sa.Column('access_level', sa.Enum('read', 'write', name='accesslevel'), nullable=False, comment='Informational access tier'),
        sa.Column('view_medical_history', sa.Boolean(), nullable=False),
        sa.Column('add_medical_records', sa.Boolean(), nullable=False),
        sa.Column('edit_medical_records', sa.Boolean(), nullable=False),
        sa.Column('delete_medical_records', sa.Boolean(), nullable=False),
        sa.Column('add_prescriptions', sa.Boolean(), nullable=False),
        sa.Column('schedule_appointments', sa.Boolean(), nullable=False),
        sa.Column('edit_pet_info', sa.Boolean(), nullable=False),
        sa.Column('view_owner_info', sa.Boolean(), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_by_id', sa.Uuid(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True, comment='Free-text notes, not authoritative'),
        sa.Column('granted_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['pet_id'], ['pets.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['veterinarian_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['granted_by_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['revoked_by_id'], ['users.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pet_access_pet_id', 'pet_access', ['pet_id'])
    op.create_index('ix_pet_access_veterinarian_id', 'pet_access', ['veterinarian_id'])
    op.create_index('ix_pet_access_granted_by_id', 'pet_access', ['granted_by_id'])
    op.create_index('ix_pet_access_is_revoked', 'pet_access', ['is_revoked'])
    op.create_index('idx_pet_access_vet_active', 'pet_access', ['veterinarian_id', 'is_revoked'])
    op.create_index('idx_pet_access_grantor_active', 'pet_access', ['granted_by_id', 'is_revoked'])

    # At most one active grant per pet/veterinarian pair
    op.create_index(
        'uq_pet_access_active_pair',
        'pet_access',
        ['pet_id', 'veterinarian_id'],
        unique=True,
        postgresql_where=sa.text('is_revoked = false'),
        sqlite_where=sa.text('is_revoked = 0'),
    )


def downgrade() -> None:
    op.drop_table('pet_access')
    op.drop_table('medical_records')
    op.drop_table('pets')
    op.drop_table('users')

    if op.get_bind().dialect.name != 'postgresql':
        return

    # Drop enum types
    op.execute("DROP TYPE IF EXISTS accesslevel")
    op.execute("DROP TYPE IF EXISTS medicalrecordtype")
    op.execute("DROP TYPE IF EXISTS petgender")
    op.execute("DROP TYPE IF EXISTS petspecies")
    op.execute("DROP TYPE IF EXISTS userrole")
