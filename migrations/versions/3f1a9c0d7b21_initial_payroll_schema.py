"""initial payroll schema

Revision ID: 3f1a9c0d7b21
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c0d7b21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('country', sa.String(length=80), nullable=False),
        sa.Column('currency', sa.String(length=10), nullable=False),
        sa.Column('foundation_date', sa.Date(), nullable=False),
        sa.Column('logo', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=120), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_table(
        'positions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('base_salary', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('daily_hours', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('period', sa.String(length=40), nullable=False),
        sa.Column('work_days', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('daily_hours > 0', name='ck_position_daily_hours_positive'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_table(
        'banks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=80), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.Enum('admin_principal', 'admin_nomina', name='user_role_enum'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'deductions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=80), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('type'),
    )
    op.create_table(
        'perceptions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=80), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('type'),
    )

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=False),
        sa.Column('position_id', sa.Integer(), nullable=False),
        sa.Column('ci', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=80), nullable=False),
        sa.Column('surnames', sa.String(length=120), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('birthdate', sa.Date(), nullable=True),
        sa.Column('gender', sa.Enum('Masculino', 'Femenino', name='employee_gender_enum'), nullable=True),
        sa.Column('base_salary', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('hire_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('base_salary >= 0', name='ck_employee_base_salary_non_negative'),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['position_id'], ['positions.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('ci'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_emp_dept_id', 'employees', ['department_id'], unique=False)
    op.create_index('ix_emp_position_id', 'employees', ['position_id'], unique=False)

    op.create_table(
        'bank_accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('bank_id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('account_number', sa.String(length=40), nullable=False),
        sa.Column('account_type', sa.String(length=30), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['bank_id'], ['banks.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('bank_id', 'account_number', name='uq_bank_account_number'),
    )
    op.create_index('ix_bank_accounts_bank_id', 'bank_accounts', ['bank_id'], unique=False)
    op.create_index('ix_bank_accounts_employee_id', 'bank_accounts', ['employee_id'], unique=False)

    op.create_table(
        'attendances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('entry_time', sa.Time(), nullable=False),
        sa.Column('exit_time', sa.Time(), nullable=False),
        sa.Column('hours_worked', sa.Numeric(precision=6, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_attendances_employee_id', 'attendances', ['employee_id'], unique=False)
    op.create_index('ix_attendance_employee_date', 'attendances', ['employee_id', 'date'], unique=False)

    op.create_table(
        'payrolls',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('period', sa.String(length=60), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('base_salary', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('overtime_hours', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('gross_salary', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('net_salary', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('state', sa.Enum('Generada', 'Pendiente', 'Pagada', 'Cancelada', name='payroll_state_enum'), nullable=False),
        sa.Column('export_file', sa.String(length=120), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('start_date <= end_date', name='ck_payroll_period_order'),
        sa.CheckConstraint('overtime_hours >= 0', name='ck_payroll_overtime_non_negative'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payrolls_employee_id', 'payrolls', ['employee_id'], unique=False)
    op.create_index('ix_payroll_employee_period', 'payrolls', ['employee_id', 'start_date', 'end_date'], unique=False)
    op.create_index('ix_payroll_state', 'payrolls', ['state'], unique=False)

    op.create_table(
        'payroll_deductions',
        sa.Column('payroll_id', sa.Integer(), nullable=False),
        sa.Column('deduction_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['deduction_id'], ['deductions.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['payroll_id'], ['payrolls.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('payroll_id', 'deduction_id'),
    )
    op.create_table(
        'payroll_perceptions',
        sa.Column('payroll_id', sa.Integer(), nullable=False),
        sa.Column('perception_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['perception_id'], ['perceptions.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['payroll_id'], ['payrolls.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('payroll_id', 'perception_id'),
    )

    op.create_table(
        'settlement_files',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('bank_id', sa.Integer(), nullable=False),
        sa.Column('file_name', sa.String(length=120), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('payroll_count', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['bank_id'], ['banks.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('file_name'),
    )
    op.create_index('ix_settlement_files_bank_id', 'settlement_files', ['bank_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_settlement_files_bank_id', table_name='settlement_files')
    op.drop_table('settlement_files')
    op.drop_table('payroll_perceptions')
    op.drop_table('payroll_deductions')
    op.drop_index('ix_payroll_state', table_name='payrolls')
    op.drop_index('ix_payroll_employee_period', table_name='payrolls')
    op.drop_index('ix_payrolls_employee_id', table_name='payrolls')
    op.drop_table('payrolls')
    op.drop_index('ix_attendance_employee_date', table_name='attendances')
    op.drop_index('ix_attendances_employee_id', table_name='attendances')
    op.drop_table('attendances')
    op.drop_index('ix_bank_accounts_employee_id', table_name='bank_accounts')
    op.drop_index('ix_bank_accounts_bank_id', table_name='bank_accounts')
    op.drop_table('bank_accounts')
    op.drop_index('ix_emp_position_id', table_name='employees')
    op.drop_index('ix_emp_dept_id', table_name='employees')
    op.drop_table('employees')
    op.drop_table('perceptions')
    op.drop_table('deductions')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
    op.drop_table('banks')
    op.drop_table('positions')
    op.drop_table('departments')
    op.drop_table('companies')
    sa.Enum(name='payroll_state_enum').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='employee_gender_enum').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='user_role_enum').drop(op.get_bind(), checkfirst=True)
