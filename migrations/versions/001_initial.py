from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

OVERLAP_CONSTRAINT = 'reservations_no_overlap'


def upgrade():
    op.create_table(
        'restaurants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('api_key', sa.String(length=64), nullable=False),
        sa.Column('reservation_duration', sa.Integer(), nullable=False),
        sa.Column('buffer_time', sa.Integer(), nullable=False),
        sa.CheckConstraint('reservation_duration > 0', name='ck_restaurant_duration_positive'),
        sa.CheckConstraint('buffer_time >= 0', name='ck_restaurant_buffer_non_negative'),
    )
    op.create_index('ix_restaurants_api_key', 'restaurants', ['api_key'], unique=True)

    op.create_table(
        'zones',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=80), nullable=False),
    )
    op.create_index('ix_zones_restaurant_id', 'zones', ['restaurant_id'])

    op.create_table(
        'tables',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('zone_id', sa.Integer(), sa.ForeignKey('zones.id', ondelete='SET NULL'), nullable=True),
        sa.CheckConstraint('capacity >= 1', name='ck_table_capacity_positive'),
    )
    op.create_index('ix_tables_restaurant_id', 'tables', ['restaurant_id'])

    op.create_table(
        'weekly_schedules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('opening_time', sa.Time(), nullable=False),
        sa.Column('closing_time', sa.Time(), nullable=False),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_schedule_day_of_week'),
    )
    op.create_index('ix_weekly_schedules_restaurant_day', 'weekly_schedules', ['restaurant_id', 'day_of_week'])

    op.create_table(
        'schedule_exceptions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('opening_time', sa.Time(), nullable=True),
        sa.Column('closing_time', sa.Time(), nullable=True),
        sa.Column('description', sa.String(length=255), nullable=True),
    )
    op.create_index('ix_schedule_exceptions_restaurant_date', 'schedule_exceptions', ['restaurant_id', 'date'])

    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_clients_phone', 'clients', ['phone'], unique=True)
    op.create_index('ix_clients_email', 'clients', ['email'])

    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('table_id', sa.Integer(), sa.ForeignKey('tables.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('blocked_until', sa.DateTime(), nullable=False),
        sa.Column('guests', sa.Integer(), nullable=False),
        sa.Column('confirmed', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('guests >= 1', name='ck_reservation_guests_positive'),
        sa.CheckConstraint('end_time > start_time', name='ck_reservation_window'),
    )
    op.create_index('ix_reservations_restaurant_id', 'reservations', ['restaurant_id'])
    op.create_index('ix_reservations_client_id', 'reservations', ['client_id'])
    op.create_index('ix_reservations_table_start', 'reservations', ['table_id', 'start_time'])

    dialect = op.get_bind().dialect.name
    if dialect == 'postgresql':
        op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
        op.execute(
            f"ALTER TABLE reservations ADD CONSTRAINT {OVERLAP_CONSTRAINT} "
            "EXCLUDE USING gist (table_id WITH =, tsrange(start_time, blocked_until, '[)') WITH &&) "
            "WHERE (confirmed)"
        )
    elif dialect == 'sqlite':
        op.execute(
            f"CREATE TRIGGER {OVERLAP_CONSTRAINT} BEFORE INSERT ON reservations "
            "WHEN NEW.confirmed "
            "BEGIN "
            f"SELECT RAISE(ABORT, '{OVERLAP_CONSTRAINT}') "
            "WHERE EXISTS (SELECT 1 FROM reservations r "
            "WHERE r.table_id = NEW.table_id AND r.confirmed "
            "AND r.start_time < NEW.blocked_until AND NEW.start_time < r.blocked_until); "
            "END"
        )


def downgrade():
    dialect = op.get_bind().dialect.name
    if dialect == 'postgresql':
        op.execute(f'ALTER TABLE reservations DROP CONSTRAINT IF EXISTS {OVERLAP_CONSTRAINT}')
    elif dialect == 'sqlite':
        op.execute(f'DROP TRIGGER IF EXISTS {OVERLAP_CONSTRAINT}')

    op.drop_index('ix_reservations_table_start', table_name='reservations')
    op.drop_index('ix_reservations_client_id', table_name='reservations')
    op.drop_index('ix_reservations_restaurant_id', table_name='reservations')
    op.drop_table('reservations')
    op.drop_index('ix_clients_email', table_name='clients')
    op.drop_index('ix_clients_phone', table_name='clients')
    op.drop_table('clients')
    op.drop_index('ix_schedule_exceptions_restaurant_date', table_name='schedule_exceptions')
    op.drop_table('schedule_exceptions')
    op.drop_index('ix_weekly_schedules_restaurant_day', table_name='weekly_schedules')
    op.drop_table('weekly_schedules')
    op.drop_index('ix_tables_restaurant_id', table_name='tables')
    op.drop_table('tables')
    op.drop_index('ix_zones_restaurant_id', table_name='zones')
    op.drop_table('zones')
    op.drop_index('ix_restaurants_api_key', table_name='restaurants')
    op.drop_table('restaurants')
